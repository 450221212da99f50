"""Tests for the heuristic code validator."""

import pytest

from appbuilder.core.exceptions import InvalidArgumentError
from appbuilder.llm.renderer import CodeTemplateRenderer
from appbuilder.schemas.codegen import IssueSeverity, ValidateCodeRequest
from appbuilder.services.validation_service import normalize_language, validate_code

pytestmark = pytest.mark.unit


def _validate(code: str, language: str = "typescript"):
    return validate_code(ValidateCodeRequest(code=code, language=language))


def test_clean_script_has_no_findings():
    result = _validate("// Sum helper\nconst total = [1, 2, 3].reduce((a, b) => a + b, 0);\n")

    assert result.valid is True
    assert result.errors == []
    assert result.suggestions == []


def test_missing_semicolon_is_a_warning_only():
    result = _validate("// counter\nlet count = 0\ncount += 1;", language="javascript")

    assert result.valid is True
    assert len(result.errors) == 1
    issue = result.errors[0]
    assert (issue.line, issue.column, issue.message) == (2, 13, "Missing semicolon")
    assert issue.severity == IssueSeverity.WARNING


def test_react_usage_without_import_is_an_error():
    result = _validate("// view\nconst App = () => <div>React</div>;", language="tsx")

    assert result.valid is False
    assert [issue.message for issue in result.errors] == ["Missing React import"]
    assert result.errors[0].severity == IssueSeverity.ERROR


def test_encore_endpoint_without_import_is_an_error():
    code = '// endpoint\nexport const ping = api({ method: "GET" }, async () => ({}));'

    result = _validate(code)

    assert result.valid is False
    assert [issue.message for issue in result.errors] == ["Missing Encore.ts API import"]


def test_repeated_suggestions_are_reported_once():
    code = "// guards\nif (a) {\n  b();\n}\nif (c) {\n  d();\n}"

    result = _validate(code, language="javascript")

    assert result.suggestions == ["Check for unclosed brackets"]


def test_untyped_typescript_function_gets_annotation_hint():
    result = _validate("// util\nfunction add(a, b) {\n  return a + b;\n}")

    assert result.suggestions == [
        "Check for unclosed brackets",
        "Consider adding TypeScript type annotations",
    ]


@pytest.mark.parametrize(
    ("code", "suggestions"),
    [
        ("CREATE TABLE t (id INT);", ["Add comments to improve code readability"]),
        ("-- audit table\nCREATE TABLE t (id INT);", []),
    ],
)
def test_comment_markers_follow_language(code, suggestions):
    assert _validate(code, language="sql").suggestions == suggestions


def test_long_code_gets_split_suggestion():
    result = _validate("# notes\n" + "x" * 1001, language="yaml")

    assert result.suggestions == ["Consider breaking this into smaller functions or components"]


def test_unknown_language_skips_script_rules():
    result = _validate("// ruby-ish\nx = 1", language="ruby")

    assert result.valid is True
    assert result.errors == []


@pytest.mark.parametrize("code", ["", "   \n  "])
def test_empty_code_is_rejected(code):
    with pytest.raises(InvalidArgumentError, match="Code is required"):
        _validate(code)


@pytest.mark.parametrize(
    ("raw", "expected"),
    [("TSX", "typescript"), (" js ", "javascript"), ("sql", "sql"), ("", "")],
)
def test_normalize_language(raw, expected):
    assert normalize_language(raw) == expected


@pytest.mark.parametrize("target", ["frontend", "backend", "infra", "sql"])
def test_rendered_starter_templates_are_valid(target):
    (file,) = CodeTemplateRenderer().render("inventory tracker", target)

    assert _validate(file.content, language=file.language).valid is True
