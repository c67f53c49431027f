"""Exceptions raised by the JSR registry client."""


class JsrRegistryError(Exception):
    """Base class for every error raised by this package."""


class FetchError(JsrRegistryError):
    """A registry fetch failed.

    Messages never include the request URL.
    """


class TransportError(FetchError):
    """The request could not be sent or the response could not be read."""


class HttpStatusError(FetchError):
    """The registry answered with a non-success status other than 404."""

    def __init__(self, status: int):
        self.status = status
        super().__init__(f"Registry responded with HTTP status {status}")


class DecodeError(FetchError, ValueError):
    """A response body did not match the expected JSON structure."""


class NpmCompNameError(JsrRegistryError, ValueError):
    """An npm-compatible package name could not be decoded."""


class PrefixMismatchError(NpmCompNameError):
    """The name does not start with ``@<provider_scope>/``."""

    def __init__(self, provider_scope: str):
        self.provider_scope = provider_scope
        super().__init__(f"Input does not start with @{provider_scope}/")


class NameFormatError(NpmCompNameError):
    """The name is not in the ``scope__name`` form."""

    def __init__(self):
        super().__init__("Input does not have the correct format (scope__name)")
