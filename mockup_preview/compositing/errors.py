class MockupError(Exception):
    """Base class for everything the preview pipeline raises."""


class ImageLoadError(MockupError):
    """A template or design could not be fetched or decoded."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to load image: {url} ({reason})")


class SourceNotAllowed(ImageLoadError):
    """The source host or path is outside what the caller may read."""


class RasterBoundsError(MockupError, IndexError):
    """A pixel read fell outside the raster."""


class CompositeFailure(MockupError):
    """The pixel pass could not run, e.g. the buffers disagree in size."""
