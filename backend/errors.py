class ImageTuneError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500


class ValidationError(ImageTuneError):
    """The upload is missing or not an acceptable image."""

    status_code = 400


class UploadRejected(ValidationError):
    """The upload filter refused the file (type, size, or empty body)."""

    # Rejected uploads are reported like any other generation failure.
    status_code = 500


class UpstreamError(ImageTuneError):
    """An external AI service failed or returned malformed data."""


class StorageError(ImageTuneError):
    """Reading or writing a generated asset failed."""


class ConfigurationError(ImageTuneError):
    """Startup configuration is incomplete."""
