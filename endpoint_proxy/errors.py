"""Error taxonomy for endpoint management and provider dispatch.

Every error carries the HTTP status it maps to; the app renders them
as ``{"error": message}`` at the request boundary.
"""


class ProxyError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code: int = 500
    default_message: str = "Failed to process request"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ProxyError):
    """Missing or malformed caller input (prompt, key, target URL)."""

    status_code = 400
    default_message = "Invalid request"


class NotFoundError(ProxyError):
    status_code = 404
    default_message = "Endpoint not found"


class OriginNotAllowedError(ProxyError):
    status_code = 403
    default_message = "Origin not allowed for this endpoint"


class UnsupportedProviderError(ProxyError):
    status_code = 400

    def __init__(self, api_type: str):
        self.api_type = api_type
        super().__init__(f"Unsupported API type: {api_type}")


class UpstreamError(ProxyError):
    """Transport failure or unusable response from the upstream provider."""

    status_code = 500
    default_message = "Failed to reach upstream provider"
