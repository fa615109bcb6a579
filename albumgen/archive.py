"""
ArchiveBuilder - Packs the kept originals into one downloadable zip.
"""

import logging
import os
import zipfile
from typing import Optional, Sequence


class ArchiveBuilder:
    """
    Builds the album download.

    Runs once per build, after every retention decision is final. Entries are
    stored flat, under their basename.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)

    def build(self, paths: Sequence[str], out_path: str) -> str:
        """
        Write the archive.

        Args:
            paths: Files to include, in album order
            out_path: Archive to create (overwritten if present)

        Returns:
            out_path
        """
        seen = set()
        with zipfile.ZipFile(out_path, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for path in paths:
                arcname = os.path.basename(path)
                if arcname in seen:
                    self.logger.warning(f"Skipping duplicate archive entry: {arcname}")
                    continue
                seen.add(arcname)
                zf.write(path, arcname=arcname)

        size_mb = os.path.getsize(out_path) / (1024 * 1024)
        self.logger.info(f"Archive written: {out_path} ({len(seen)} files, {size_mb:.1f} MB)")
        return out_path
