"""
Defines custom exceptions for the application to allow for more specific error handling.
"""


class TorboxCliError(Exception):
    """Base exception for all application-specific errors."""


class ConfigurationError(TorboxCliError):
    """Raised for issues related to configuration loading or validation."""


class CredentialMissingError(TorboxCliError):
    """Raised when no TorBox API key is available before a submission."""


class SubmissionRejectedError(TorboxCliError):
    """Raised when TorBox refuses to create a web download."""


class InvalidSubmissionError(TorboxCliError):
    """Raised when the link to submit is empty or otherwise unusable."""


class MissingJobIdError(TorboxCliError):
    """Raised when a create response carries no web download ID."""


class StatusQueryFailedError(TorboxCliError):
    """Raised when the web download listing cannot be fetched."""


class JobVanishedError(TorboxCliError):
    """
    Raised when a submitted web download is no longer present in the listing
    while it is still being polled.
    """


class RemoteJobFailedError(TorboxCliError):
    """Raised when TorBox reports the web download itself as failed."""


class PollTimeoutError(TorboxCliError):
    """Raised when the download does not finish within the polling budget."""


class LinkResolutionFailedError(TorboxCliError):
    """Raised when a direct download link cannot be obtained."""


class WorkflowCancelledError(TorboxCliError):
    """Raised when the caller cancels a workflow between polling attempts."""
