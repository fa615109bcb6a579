"""
Toolbox - Wrappers around the external image, metadata and video tools.

All pixel work is done by command line tools (ImageMagick, exiftool,
exiftran, ffmpeg, facedetect and the lossless optimizers) run through sh.
"""

import json
import logging
import os
import shutil
from typing import Dict, Iterable, List, Optional, Tuple

import sh

from .errors import MissingToolError, ProcessingError

Size = Tuple[int, int]

# exiftran and facedetect are only needed for the matching features;
# ffmpeg only when videos are present.
REQUIRED_TOOLS = ('exiftool', 'convert')
OPTIONAL_TOOLS = ('jpegoptim', 'pngcrush')
ALL_TOOLS = REQUIRED_TOOLS + ('exiftran', 'facedetect', 'ffmpeg') + OPTIONAL_TOOLS

VIDEO_FORMATS = ('mp4', 'webm')

LINEAR_GAMMA = '0.454545'
DISPLAY_GAMMA = '2.2'


def geometry(size: Size, flag: str = '') -> str:
    """ImageMagick geometry string, e.g. "1600x1200>"."""
    return f"{size[0]}x{size[1]}{flag}"


class Toolbox:
    """
    Runs the external tools the pipeline depends on.

    Binaries are looked up on PATH; a different binary can be configured per
    tool (see from_env()). Any non-zero exit of a tool raises ProcessingError.
    """

    def __init__(
        self,
        binaries: Optional[Dict[str, str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize toolbox.

        Args:
            binaries: Optional mapping of tool name -> binary name or path
            logger: Optional logger instance
        """
        self.binaries = dict(binaries or {})
        self.logger = logger or logging.getLogger(__name__)
        self.optimizers: List[str] = []
        self._commands: Dict[str, sh.Command] = {}

    @classmethod
    def from_env(cls, logger: Optional[logging.Logger] = None) -> 'Toolbox':
        """Create with binaries overridden by ALBUMGEN_<TOOL> environment variables."""
        binaries = {}
        for tool in ALL_TOOLS:
            value = os.environ.get(f"ALBUMGEN_{tool.upper()}")
            if value:
                binaries[tool] = value
        return cls(binaries, logger=logger)

    def resolve(self, tool: str) -> Optional[str]:
        """Full path of a tool's binary, or None when not installed."""
        return shutil.which(self.binaries.get(tool, tool))

    def available(self, tool: str) -> bool:
        return self.resolve(tool) is not None

    def check(self, required: Iterable[str]) -> None:
        """
        Verify tools before any processing starts.

        Missing optional optimizers only disable the optimization step.

        Args:
            required: Names of the tools the build needs

        Raises:
            MissingToolError: If any required tool is not installed
        """
        missing = [tool for tool in required if not self.available(tool)]
        if missing:
            raise MissingToolError(missing)

        self.optimizers = [tool for tool in OPTIONAL_TOOLS if self.available(tool)]
        for tool in OPTIONAL_TOOLS:
            if tool not in self.optimizers:
                self.logger.info(f"{tool} not found, skipping lossless optimization with it")

    def _command(self, tool: str) -> sh.Command:
        if tool not in self._commands:
            path = self.resolve(tool)
            if path is None:
                raise MissingToolError([tool])
            self._commands[tool] = sh.Command(path)
        return self._commands[tool]

    def run(self, tool: str, *args, path: Optional[str] = None, ok_codes=(0,)) -> str:
        """
        Run a tool and return its standard output.

        Args:
            tool: Tool name
            args: Command line arguments
            path: File being processed (for error messages)
            ok_codes: Exit codes treated as success

        Raises:
            ProcessingError: If the tool exits with any other code
        """
        command = self._command(tool)
        str_args = [str(arg) for arg in args]
        self.logger.debug(f"{tool} {' '.join(str_args)}")
        try:
            return str(command(*str_args, _ok_code=list(ok_codes)))
        except sh.ErrorReturnCode as e:
            stderr = e.stderr.decode('utf-8', errors='replace').strip()
            detail = stderr.splitlines()[-1] if stderr else f"exit status {getattr(e, 'exit_code', '?')}"
            raise ProcessingError(f"{tool} failed: {detail}", path=path) from e

    def read_metadata(self, path: str) -> dict:
        """Read all metadata tags of a file with numeric values."""
        output = self.run('exiftool', '-json', '-n', '--', path, path=path)
        try:
            entries = json.loads(output)
        except ValueError as e:
            raise ProcessingError(f"unreadable exiftool output: {e}", path=path) from e
        return entries[0] if entries else {}

    def auto_rotate(self, path: str) -> None:
        """Losslessly rotate a JPEG in place according to its EXIF orientation."""
        self.run('exiftran', '-a', '-i', '-p', path, path=path)

    def optimize(self, path: str) -> bool:
        """
        Losslessly optimize a file in place with whichever optimizer fits.

        Best effort: a failing optimizer is logged and ignored.

        Returns:
            True if an optimizer ran successfully
        """
        ext = os.path.splitext(path)[1].lower()
        if ext in ('.jpg', '.jpeg') and 'jpegoptim' in self.optimizers:
            args = ('jpegoptim', '-q', '--preserve', path)
        elif ext == '.png' and 'pngcrush' in self.optimizers:
            args = ('pngcrush', '-q', '-ow', path)
        else:
            return False

        try:
            self.run(*args, path=path)
        except ProcessingError as e:
            self.logger.warning(f"Optimization skipped: {e}")
            return False
        return True

    def _color_args(self, srgb: bool) -> List[str]:
        return ['-colorspace', 'sRGB', '+profile', '!icc,*'] if srgb else []

    def resize(
        self,
        src: str,
        dst: str,
        bounds: Size,
        quality: int,
        srgb: bool = True,
        auto_orient: bool = False
    ) -> None:
        """
        Shrink an image to fit in bounds, resizing in linear light.

        With auto_orient the output is turned upright according to the EXIF
        orientation of src.
        """
        self.run(
            'convert', f"{src}[0]",
            *(['-auto-orient'] if auto_orient else []),
            '-gamma', LINEAR_GAMMA,
            '-resize', geometry(bounds, '>'),
            '-gamma', DISPLAY_GAMMA,
            *self._color_args(srgb),
            '-quality', quality,
            dst,
            path=src
        )

    def thumbnail(
        self,
        src: str,
        dst: str,
        scaled: Size,
        final: Size,
        offset: Tuple[int, int],
        quality: int,
        srgb: bool = True
    ) -> None:
        """Resize an image to exactly scaled and cut the final window at offset."""
        self.run(
            'convert', src,
            '-gamma', LINEAR_GAMMA,
            '-resize', geometry(scaled, '!'),
            '-gamma', DISPLAY_GAMMA,
            '-crop', f"{geometry(final)}+{offset[0]}+{offset[1]}",
            '+repage',
            *self._color_args(srgb),
            '-quality', quality,
            dst,
            path=src
        )

    def blur(self, src: str, dst: str, size: Size, radius: int, quality: int = 40) -> None:
        """Produce a blurred, low resolution placeholder filling size."""
        self.run(
            'convert', src,
            '-resize', geometry(size, '^'),
            '-gravity', 'center',
            '-extent', geometry(size),
            '-blur', f"0x{radius}",
            '-strip',
            '-quality', quality,
            dst,
            path=src
        )

    def detect_face(self, path: str) -> Optional[Tuple[float, float]]:
        """
        Find the most prominent face.

        Returns:
            Center pixel (x, y) of the best face, or None when there is none
        """
        output = self.run('facedetect', '--best', '--', path, path=path, ok_codes=(0, 2))
        for line in output.splitlines():
            fields = line.split()
            if len(fields) != 4:
                continue
            x, y, w, h = (float(v) for v in fields)
            return x + w / 2, y + h / 2
        return None

    def extract_frame(self, src: str, dst: str, seconds: float = 1.0) -> None:
        """Extract a single poster frame from a video."""
        self.run(
            'ffmpeg', '-loglevel', 'error', '-nostdin', '-y',
            '-ss', seconds,
            '-i', src,
            '-frames:v', 1,
            dst,
            path=src
        )
        if not os.path.exists(dst):
            raise ProcessingError(f"no frame at {seconds}s", path=src)

    def transcode(self, src: str, dst: str, fmt: str, bounds: Size) -> None:
        """Transcode a video to a streaming format bounded by bounds."""
        scale = (
            f"scale='min({bounds[0]},iw)':'min({bounds[1]},ih)'"
            f":force_original_aspect_ratio=decrease,"
            f"scale=trunc(iw/2)*2:trunc(ih/2)*2"
        )
        if fmt == 'mp4':
            codec = [
                '-c:v', 'libx264', '-profile:v', 'high', '-pix_fmt', 'yuv420p',
                '-preset', 'medium', '-crf', 23,
                '-c:a', 'aac', '-b:a', '128k',
                '-movflags', '+faststart',
            ]
        elif fmt == 'webm':
            codec = [
                '-c:v', 'libvpx-vp9', '-crf', 32, '-b:v', 0,
                '-c:a', 'libopus', '-b:a', '96k',
            ]
        else:
            raise ValueError(f"unsupported video format: {fmt}")

        self.run(
            'ffmpeg', '-loglevel', 'error', '-nostdin', '-y',
            '-i', src,
            '-vf', scale,
            *codec,
            '-f', fmt,
            dst,
            path=src
        )
