class DishGenieError(Exception):
    pass


class ConfigurationError(DishGenieError):
    """Missing or invalid process configuration. Raised before any work starts."""


class CatalogError(DishGenieError):
    """The catalog could not supply enough candidate dishes.

    Never reaches the caller: it only moves the request onto the
    knowledge-only prompt.
    """


class ModelError(DishGenieError):
    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class RetryableModelError(ModelError):
    """Rate limited (429) or server side (5xx) failure."""


class NonRetryableModelError(ModelError):
    """A request or configuration defect another model will not fix."""


class FallbackExhaustedError(ModelError):
    def __init__(self, primary_error: ModelError, fallback_error: ModelError) -> None:
        super().__init__(
            f"Primary model failed: {primary_error.message}; "
            f"fallback model failed: {fallback_error.message}",
            status_code=fallback_error.status_code,
        )
        self.primary_error = primary_error
        self.fallback_error = fallback_error


class ParseError(DishGenieError):
    """The model answered, but not with recommendations we can use."""


class RecommendationError(DishGenieError):
    def __init__(self, message: str, *, details: str = "") -> None:
        super().__init__(message)
        self.message = message
        self.details = details
