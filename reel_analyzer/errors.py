from typing import Optional


class ProviderError(Exception):
    """Base class for failures talking to Apify, Supadata or an LLM."""

    status_code = 500

    def __init__(self, message: str, provider: str = "", status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.provider = provider
        self.status = status


class RateLimitedError(ProviderError):
    status_code = 429


class NotFoundError(ProviderError):
    status_code = 404


class InvalidInputError(ProviderError, ValueError):
    status_code = 400


class UpstreamUnavailableError(ProviderError, RuntimeError):
    status_code = 502


def error_for_status(status: int, message: str, provider: str) -> ProviderError:
    if status == 429:
        return RateLimitedError(message, provider, status)
    if status == 404:
        return NotFoundError(message, provider, status)
    if status in (400, 401, 403, 422):
        return InvalidInputError(message, provider, status)
    return UpstreamUnavailableError(message, provider, status)
