"""
Error taxonomy for the Cardano relay.

Every error carries the HTTP status the route boundary should answer with,
and renders to the `{"error": ...}` envelope the client views expect.
"""

from typing import Dict, Iterable, List, Optional


class LedgerServiceError(Exception):
    """Base class for all relay errors"""

    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, str]:
        return {"error": self.message}


class ConfigurationError(LedgerServiceError):
    """A required deployment setting is missing. Not retryable."""

    status_code = 500

    def __init__(self, missing_keys: Iterable[str], label: str = "Transfer"):
        self.missing_keys: List[str] = list(missing_keys)
        super().__init__(
            f"{label} credentials not configured on server: "
            f"missing {', '.join(self.missing_keys)}"
        )


class ValidationError(LedgerServiceError):
    """Caller input is incomplete or malformed."""

    status_code = 400


class UpstreamApiError(LedgerServiceError):
    """The external service rejected the request or could not be reached."""

    prefix = "Upstream API error"

    def __init__(self, status_code: int, detail: str):
        self.detail = detail
        super().__init__(f"{self.prefix}: {detail}", status_code=status_code)


class TransferApiError(UpstreamApiError):
    prefix = "Transfer API error"


class MintApiError(UpstreamApiError):
    prefix = "Minting API error"


class InvalidResponseError(LedgerServiceError):
    """Upstream answered 2xx with a body that is not a JSON object."""

    status_code = 500
    max_snippet = 200

    def __init__(self, body: str):
        self.snippet = (body or "")[:self.max_snippet]
        super().__init__(f"Invalid JSON response: {self.snippet}")


class MintError(LedgerServiceError):
    """Minting service answered but reported a non-success status."""

    status_code = 502


class UnexpectedError(LedgerServiceError):
    status_code = 500

    def __init__(self, cause: Exception):
        self.cause = cause
        super().__init__(f"Server error: {cause}")
