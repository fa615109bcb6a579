"""
SourceFile - One photo or video found in the input directory.
"""

import os
from dataclasses import dataclass
from typing import Optional

IMAGE_EXTENSIONS = {'.jpg', '.jpeg', '.png', '.tif', '.tiff'}
VIDEO_EXTENSIONS = {'.mp4', '.mov', '.avi', '.mkv', '.webm', '.3gp', '.m4v'}

JPEG_EXTENSIONS = {'.jpg', '.jpeg'}


def detect_kind(path: str) -> Optional[str]:
    """Return 'image', 'video' or None based on the file extension."""
    ext = os.path.splitext(path)[1].lower()
    if ext in IMAGE_EXTENSIONS:
        return 'image'
    if ext in VIDEO_EXTENSIONS:
        return 'video'
    return None


@dataclass(frozen=True)
class SourceFile:
    """
    A source photo or video.

    Attributes:
        path: Path to the file
        kind: 'image' or 'video'
    """
    path: str
    kind: str

    @property
    def filename(self) -> str:
        return os.path.basename(self.path)

    @property
    def stem(self) -> str:
        return os.path.splitext(self.filename)[0]

    @property
    def extension(self) -> str:
        """Lower-cased extension without the dot, 'jpeg' normalized to 'jpg'."""
        ext = os.path.splitext(self.filename)[1].lower().lstrip('.')
        return 'jpg' if ext == 'jpeg' else ext

    @property
    def is_video(self) -> bool:
        return self.kind == 'video'

    @classmethod
    def from_path(cls, path: str) -> Optional['SourceFile']:
        """Create from a path, or None when the extension is not supported."""
        kind = detect_kind(path)
        if kind is None:
            return None
        return cls(path=path, kind=kind)
