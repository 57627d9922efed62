from __future__ import annotations


class RainstashError(Exception):
    """Base class for errors raised by rainstash-browse."""


class ManifestError(RainstashError):
    pass


class ManifestDownloadError(ManifestError):
    """The manifest could not be fetched or written to the cache."""


class ManifestParseError(ManifestError):
    """The manifest is not valid JSON or is missing required data."""
