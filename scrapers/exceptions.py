"""Errors raised by the Atlas export run. Every one of them aborts the run."""


class AtlasExportError(RuntimeError):
    """Base error for Atlas export failures."""


class MissingCredentials(AtlasExportError):
    """Raised when ATLAS_USERNAME / ATLAS_PASSWORD are not configured."""


class LoginFailed(AtlasExportError):
    """Raised when the login form could not be submitted or was rejected."""


class FilterApplicationFailed(AtlasExportError):
    """Raised when the saved export filter or the date range could not be applied."""


class ExportTriggerFailed(AtlasExportError):
    """Raised when the 'Export as CSV' control is missing or unclickable."""


class DownloadError(AtlasExportError):
    """Base error for download detection failures."""


class DownloadTimeout(DownloadError):
    """Raised when no stable export file appears before the deadline."""


class DownloadDirectoryLost(DownloadError):
    """Raised when the scratch download directory disappears while polling."""
