"""Exceptions raised by the documentation scraper."""


class DocScraperError(Exception):
    """Base class for all scraper errors."""


class PresetNotFoundError(DocScraperError):
    """Raised when a preset name is not present in presets.json."""

    def __init__(self, name):
        super().__init__(f"Unknown preset: {name}")
        self.name = name


class MissingURLError(DocScraperError):
    """Raised when neither the preset nor the overrides provide a site URL."""


class RendererLaunchError(DocScraperError):
    """Raised when the browser cannot be started."""


class IndexPageError(DocScraperError):
    """Raised when the index page cannot be loaded."""


class RenderError(DocScraperError):
    """Navigation to a single page failed or timed out."""


class UnsupportedFormatError(DocScraperError):
    """Raised by the archive converter for an unknown target format."""

    def __init__(self, fmt):
        super().__init__(f"Unsupported format: {fmt}")
        self.fmt = fmt
