"""Error taxonomy shared by the pipeline and the request facade."""
from __future__ import annotations


class ClauseScopeError(Exception):
    """Base error; ``code`` is the stable identifier surfaced to callers."""

    code = "INTERNAL_ERROR"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def as_dict(self) -> dict:
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(ClauseScopeError):
    code = "VALIDATION_ERROR"


class ParseError(ClauseScopeError):
    code = "PARSE_ERROR"


class TooShort(ParseError):
    code = "TOO_SHORT"


class InvalidModelResponse(ClauseScopeError):
    code = "INVALID_MODEL_RESPONSE"

    def __init__(self, operation: str, raw: str, detail: str = ""):
        msg = f"Model response for '{operation}' is not valid JSON of the expected shape"
        if detail:
            msg = f"{msg}: {detail}"
        super().__init__(msg)
        self.operation = operation
        self.raw = raw


class NoRelevantContent(ClauseScopeError):
    code = "NO_RELEVANT_CONTENT"


class ExternalServiceError(ClauseScopeError):
    code = "EXTERNAL_SERVICE_ERROR"


class FetchError(ExternalServiceError):
    code = "FETCH_ERROR"
