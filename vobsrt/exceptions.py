"""Custom Exceptions for the VobSrt application."""

class VobSrtError(Exception):
    """Base class for exceptions in this module."""
    pass

class ConfigurationError(VobSrtError):
    """Exception raised for errors in configuration loading."""
    pass

class InputAccessError(VobSrtError):
    """Exception raised when the index or payload file is missing or unreadable."""
    pass

class ExternalToolError(VobSrtError):
    """Exception raised when the external renderer (ffmpeg) exits non-zero or cannot be spawned."""

    def __init__(self, message: str, stderr: str = ""):
        super().__init__(message)
        self.stderr = stderr

class RecognitionError(VobSrtError):
    """Exception raised when the batch recognizer call fails outright."""
    pass

class EmptyResultError(VobSrtError):
    """Exception raised when a pipeline stage produces nothing to work with."""
    pass

class FormattingError(VobSrtError):
    """Exception raised for errors during subtitle formatting."""
    pass

class FileSystemError(VobSrtError):
    """Exception raised for file system related errors (permissions, not found etc)."""
    pass
