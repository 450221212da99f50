"""Pydantic schemas for the code template catalog and code validation.

- CodeTemplate / TemplatesResponse: GET /api/templates
- ValidateCodeRequest / ValidateCodeResponse: POST /api/validate
"""

from enum import StrEnum

from appbuilder.queue.schemas import CamelModel


class CodeTemplate(CamelModel):
    """One starter template the offline generator can render."""

    id: str
    name: str
    description: str
    target: str
    language: str
    path: str
    template: str
    variables: list[str]


class TemplatesResponse(CamelModel):
    templates: list[CodeTemplate]


class IssueSeverity(StrEnum):
    ERROR = "error"
    WARNING = "warning"


class ValidationIssue(CamelModel):
    """A finding at a 1-based line and column."""

    line: int
    column: int
    message: str
    severity: IssueSeverity


class ValidateCodeRequest(CamelModel):
    # Defaults let missing fields reach the domain error messages
    code: str = ""
    language: str = ""


class ValidateCodeResponse(CamelModel):
    """``valid`` is False iff at least one issue has severity error."""

    valid: bool
    errors: list[ValidationIssue]
    suggestions: list[str]
