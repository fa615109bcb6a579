"""
Exception types raised while building a gallery.
"""


class GalleryError(Exception):
    """Base class for all albumgen errors."""

    exit_code = 1


class UsageError(GalleryError):
    """Bad arguments or options. No output has been touched."""

    exit_code = 2


class MissingToolError(GalleryError):
    """A required external tool is not installed."""

    def __init__(self, tools):
        self.tools = sorted(tools)
        super().__init__(f"Missing required tool(s): {', '.join(self.tools)}")


class ProcessingError(GalleryError):
    """A per-file step failed; the whole run is aborted."""

    def __init__(self, message: str, path=None):
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
