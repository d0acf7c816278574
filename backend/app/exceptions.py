"""Domain errors raised by the pricing path and rendered as ``{"message": ...}``."""


class TourPricingError(Exception):
    status_code = 500
    default_message = "Failed to calculate tour price"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(TourPricingError):
    """Malformed or unresolvable input. The calculation is aborted."""

    status_code = 400
    default_message = "Invalid booking configuration"


class UpstreamUnavailable(TourPricingError):
    """A data source (rates, catalog) failed and no fallback applies."""

    status_code = 503
    default_message = "Pricing data is temporarily unavailable, please retry"


class NetworkError(UpstreamUnavailable):
    status_code = 502
    default_message = "Network error, please retry"
