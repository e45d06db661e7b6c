"""Custom exceptions for librespeed-exporter."""

from typing import Any

NON_RETRYABLE_STATUS_CODES = frozenset({400, 401, 403, 404})


class ExporterError(Exception):
    """Base exception for all exporter errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to dictionary."""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "context": self.context,
        }


class ConfigurationError(ExporterError):
    """Configuration-related errors."""

    pass


class SpeedtestError(ExporterError):
    """Base class for speed test acquisition errors."""

    pass


class ExecutionError(SpeedtestError):
    """The external speed test process could not be run or exited non-zero."""

    def __init__(
        self,
        command: str,
        details: str,
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(
            f"Command failed: {command}: {details}",
            command=command,
            returncode=returncode,
            stderr=stderr,
        )
        self.returncode = returncode
        self.stderr = stderr


class ParseError(SpeedtestError):
    """Speed test output is not valid JSON of the expected shape."""

    def __init__(self, details: str) -> None:
        super().__init__(f"Failed to parse speed test output: {details}", details=details)


class EmptyResultError(SpeedtestError):
    """Speed test output parsed but contained no results."""

    def __init__(self) -> None:
        super().__init__("No results returned from librespeed-cli")


class TransmissionError(ExporterError):
    """Base class for remote write delivery errors."""

    retryable = True


class EmptyBatchError(TransmissionError):
    """Attempted to send a batch without any time series."""

    retryable = False

    def __init__(self) -> None:
        super().__init__("No time series data to send")


class EncodingError(TransmissionError):
    """Serialization or compression of the write request failed."""

    retryable = False

    def __init__(self, details: str) -> None:
        super().__init__(f"Failed to encode write request: {details}", details=details)


class TransportError(TransmissionError):
    """Request could not be sent or no response was received."""

    def __init__(self, url: str, details: str) -> None:
        super().__init__(
            f"Failed to send HTTP request to {url}: {details}",
            url=url,
            details=details,
        )


class RemoteRejectionError(TransmissionError):
    """Remote write endpoint answered with a non-2xx status."""

    def __init__(self, status_code: int, reason: str, body: str) -> None:
        super().__init__(
            f"remote_write failed: {status_code} {reason} - {body}",
            status_code=status_code,
            reason=reason,
            body=body,
        )
        self.status_code = status_code
        self.reason = reason
        self.body = body

    @property
    def retryable(self) -> bool:  # type: ignore[override]
        return self.status_code not in NON_RETRYABLE_STATUS_CODES


class DeliveryError(TransmissionError):
    """All delivery attempts failed or a non-retryable failure stopped them."""

    retryable = False

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(
            f"Failed after {attempts} attempts, last error: {last_error}",
            attempts=attempts,
            last_error=str(last_error),
        )
        self.attempts = attempts
        self.last_error = last_error
