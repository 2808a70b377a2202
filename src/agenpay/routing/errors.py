"""Errors raised by quote providers.

None of these escape the quote adapter: they are collapsed into a
`SwapUnavailable` result carrying the message as its reason.
"""


class RoutingError(Exception):
    """Base class for quote and route failures."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    @property
    def reason(self) -> str:
        return self.message


class RouteUnavailableError(RoutingError):
    """Provider rejected the request, timed out, or has no route for the pair."""


class ProviderAuthError(RoutingError):
    """Credentials are missing or the provider rejected the request signature."""


class MalformedResponseError(RoutingError):
    """Provider answered with an empty or unexpected envelope."""


class InvalidAmountError(RoutingError):
    """Amount is empty, non-numeric, non-finite, zero or negative."""
