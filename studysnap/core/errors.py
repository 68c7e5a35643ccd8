"""
Error taxonomy for the generation pipeline.

Every failure inside the pipeline is expressed as an ``AIError`` subclass.
The public generation API converts all of them into synthetic fallback
content except ``MissingCredentialError``, which is a configuration problem
the user has to fix.
"""

from __future__ import annotations


class AIError(Exception):
    """Base class for generation failures."""

    code: str = "ai_error"
    description: str = "The AI request failed."

    def __init__(self, message: str | None = None):
        self.message = message or self.description
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class GenerationFailed(AIError):
    """Transport failure or no usable response from the provider."""

    code = "generation_failed"
    description = "The AI failed to generate a response. Please try again."


class InvalidResponse(AIError):
    """Response envelope could not be decoded or carried no content."""

    code = "invalid_response"
    description = "The AI returned an invalid response format."


class ParsingFailed(AIError):
    """Model output yielded zero acceptable records."""

    code = "parsing_failed"
    description = "Failed to parse the AI response into the required format."


class APIError(AIError):
    """Provider-reported failure carrying a free-form message."""

    code = "api_error"

    def __init__(self, message: str):
        super().__init__(message)

    def __str__(self) -> str:
        return f"AI Error: {self.message}"


class MissingCredentialError(APIError):
    """Hosted credential is absent or blank. Never mocked, never retried."""

    code = "missing_credential"

    def __init__(self, message: str = "missing credential for the hosted model"):
        super().__init__(message)


def format_error(error: BaseException) -> str:
    """
    Format an error for display, keeping any error code visible.

    Args:
        error: Any exception raised by the pipeline or its callers

    Returns:
        A single display string
    """
    if isinstance(error, AIError):
        return str(error)

    code = getattr(error, "errno", None) or getattr(error, "code", None)
    description = str(error) or error.__class__.__name__
    if code:
        return f"{description} (Error Code: {code})"
    return description
