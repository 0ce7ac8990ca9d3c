from __future__ import annotations


class GatewayError(RuntimeError):
    """Base for every failure the remote gateway reports to its callers."""

    def __init__(self, message: str | None = None, token: str | None = None) -> None:
        super().__init__(message or "")
        self.message = message
        self.token = token


class TransportError(GatewayError):
    """Raised on connectivity failures, unexpected HTTP statuses and undecodable bodies."""
    pass


class ApplicationError(GatewayError):
    """Raised when a well-formed response reports a business failure."""

    def __init__(self, code: str, message: str | None = None, token: str | None = None) -> None:
        super().__init__(message, token)
        self.code = code


class UnauthorizedError(GatewayError):
    """Raised on HTTP 401 or an embedded TOKEN_EXPIRED response code."""
    pass
