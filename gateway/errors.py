class GenerationError(Exception):
    """Base class for failed question generation or analysis."""
    pass


class EmptyResponseError(GenerationError):
    """The model returned no usable payload."""
    pass


class MalformedJSONError(GenerationError):
    """The payload could not be parsed, even after cleanup."""
    pass


class NetworkFailureError(GenerationError):
    """The request to the model failed."""
    pass


class MissingApiKeyError(GenerationError):
    """No Gemini API key is configured."""
    pass
