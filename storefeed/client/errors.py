# storefeed/client/errors.py

"""Closed error taxonomy for catalog API failures."""


class CatalogError(RuntimeError):
    """Base class for every failure the catalog client can surface."""

    default_message = "An unknown error occurred"

    def __init__(self, message: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CatalogError):
            return NotImplemented
        return type(self) is type(other) and self.args == other.args

    def __hash__(self) -> int:
        return hash((type(self), self.args))


class InvalidRequest(CatalogError):
    """Malformed URL or request parameters (a programming error)."""

    default_message = "Invalid URL"


class HttpStatus(CatalogError):
    """The server answered with a non-2xx status code."""

    def __init__(self, code: int) -> None:
        self.code = code
        super().__init__(f"HTTP error with status code: {code}")


class DecodeFailure(CatalogError):
    """The payload did not have the expected shape."""

    default_message = "Failed to decode the response"


class TransportFailure(CatalogError):
    """Connection, TLS or timeout failure below the HTTP layer."""

    default_message = "Network connection error"


class UnknownError(CatalogError):
    """Anything that does not fit the categories above."""
