"""Heuristic checks for generated source code.

These are line-level lint rules, not a parser. Errors mark code that will
not run as generated; warnings and suggestions are advisory. TypeScript and
JavaScript get the script rules; every language gets the general ones.
"""

import structlog

from appbuilder.core.exceptions import InvalidArgumentError
from appbuilder.schemas.codegen import (
    IssueSeverity,
    ValidateCodeRequest,
    ValidateCodeResponse,
    ValidationIssue,
)

logger = structlog.get_logger(__name__)

LANGUAGE_ALIASES = {
    "ts": "typescript",
    "tsx": "typescript",
    "js": "javascript",
    "jsx": "javascript",
}
SCRIPT_LANGUAGES = {"typescript", "javascript"}

COMMENT_MARKERS = {
    "sql": ("--", "/*"),
    "yaml": ("#",),
    "yml": ("#",),
    "python": ("#",),
}
DEFAULT_COMMENT_MARKERS = ("//", "/*")

# Lines ending this way (or starting this way) never need a semicolon
STATEMENT_ENDINGS = (";", "{", "}")
NON_STATEMENT_PREFIXES = ("//", "*")

LONG_CODE_THRESHOLD = 1000


def normalize_language(language: str) -> str:
    language = language.strip().lower()
    return LANGUAGE_ALIASES.get(language, language)


def validate_code(request: ValidateCodeRequest) -> ValidateCodeResponse:
    """Run the checks for the request's language.

    Raises:
        InvalidArgumentError: If there is no code to check
    """
    if not request.code.strip():
        raise InvalidArgumentError("Code is required")

    language = normalize_language(request.language)
    code = request.code
    errors: list[ValidationIssue] = []
    suggestions: list[str] = []

    if language in SCRIPT_LANGUAGES:
        _check_script(code, language, errors, suggestions)

    if len(code) > LONG_CODE_THRESHOLD:
        suggestions.append("Consider breaking this into smaller functions or components")

    markers = COMMENT_MARKERS.get(language, DEFAULT_COMMENT_MARKERS)
    if not any(marker in code for marker in markers):
        suggestions.append("Add comments to improve code readability")

    valid = not any(issue.severity == IssueSeverity.ERROR for issue in errors)
    logger.info(
        "code_validated",
        language=language,
        valid=valid,
        issue_count=len(errors),
        suggestion_count=len(suggestions),
    )
    # Order-preserving de-duplication
    return ValidateCodeResponse(valid=valid, errors=errors, suggestions=list(dict.fromkeys(suggestions)))


def _check_script(code: str, language: str, errors: list[ValidationIssue], suggestions: list[str]) -> None:
    for number, line in enumerate(code.split("\n"), start=1):
        stripped = line.strip()
        if not stripped:
            continue

        if (
            not stripped.endswith(STATEMENT_ENDINGS)
            and not stripped.startswith(NON_STATEMENT_PREFIXES)
            and "import " not in line
            and "export " not in line
        ):
            errors.append(
                ValidationIssue(line=number, column=len(line), message="Missing semicolon",
                                severity=IssueSeverity.WARNING)
            )

        if line.count("{") > line.count("}"):
            suggestions.append("Check for unclosed brackets")

    if language == "typescript" and "function" in code and "interface" not in code and "type" not in code:
        suggestions.append("Consider adding TypeScript type annotations")

    if ("React" in code or "jsx" in code or "tsx" in code) and "import React" not in code:
        errors.append(
            ValidationIssue(line=1, column=1, message="Missing React import", severity=IssueSeverity.ERROR)
        )

    if "api(" in code and "import" not in code and "encore.dev/api" not in code:
        errors.append(
            ValidationIssue(line=1, column=1, message="Missing Encore.ts API import", severity=IssueSeverity.ERROR)
        )
