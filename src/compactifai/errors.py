"""Error taxonomy for the CompactifAI client."""

from __future__ import annotations


class CompactifAIError(Exception):
    """Base class for every error raised by compactifai."""


class ConfigurationError(CompactifAIError):
    """Required configuration could not be resolved or is invalid."""


class FileAccessError(CompactifAIError):
    def __init__(self, message: str, *, path: str | None = None, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause


class ClientError(CompactifAIError):
    """API-level failure.

    ``status_code`` and ``response_body`` are set when the server answered;
    ``response_body`` is the raw text exactly as received.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.response_body = response_body
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.status_code is not None:
            return f"{self.message} (status={self.status_code})"
        return self.message


class DeserializationError(ClientError):
    """A 2xx response whose body is not the expected JSON shape."""


class TransportError(ClientError):
    """Network-level failure; no status code is ever set."""

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message, cause=cause)


class RequestTimeoutError(TransportError):
    pass
