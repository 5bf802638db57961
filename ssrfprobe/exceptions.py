"""Custom exception hierarchy for the SSRF prober.

Errors fall in three groups: configuration problems that abort a run
before any probe is sent, transport failures that are reported against a
single probe, and dictionary loading failures.
"""


class ScannerException(Exception):
    """Base exception for all prober errors."""
    pass


class ValidationError(ScannerException):
    """Raised when user input or configuration validation fails."""
    pass


class ConfigurationError(ValidationError):
    """Raised when the scan configuration is invalid or incomplete.

    Always fatal: reported once and the run exits with a nonzero status
    before anything is dispatched.
    """
    pass


class TargetParseError(ConfigurationError):
    """Raised when a target address or port specification cannot be parsed."""

    def __init__(self, spec: str, message: str):
        self.spec = spec
        super().__init__(f"{message}: {spec!r}")


class NetworkError(ScannerException):
    """Raised when network-related failures occur."""
    pass


class TransportError(NetworkError):
    """A single probe request failed before a full response was read.

    ``reason`` is the short operator-facing description printed in the
    scan output; ``original_error`` keeps the underlying exception.
    """

    def __init__(self, reason: str, original_error: Exception = None):
        self.reason = reason
        self.original_error = original_error
        super().__init__(reason)


class DictionaryLoadError(ScannerException, OSError):
    """Raised when a payload dictionary file is missing or unreadable."""

    def __init__(self, path: str, original_error: Exception = None):
        self.path = path
        self.original_error = original_error
        detail = f": {original_error}" if original_error else ""
        super().__init__(f"Could not load dictionary file '{path}'{detail}")
