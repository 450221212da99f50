"""Parsing helpers for free-form LLM replies."""

from appbuilder.queue.schemas import GeneratedFile

FENCE = "```"

LANGUAGE_EXTENSIONS: dict[str, str] = {
    "typescript": ".ts",
    "tsx": ".tsx",
    "javascript": ".js",
    "jsx": ".jsx",
    "sql": ".sql",
    "yaml": ".yml",
    "python": ".py",
    "go": ".go",
}

TARGET_STEMS: dict[str, str] = {
    "frontend": "src/component",
    "backend": "api/handler",
    "sql": "schema",
    "infra": "docker-compose",
}


def infer_file_path(language: str, target: str) -> str:
    """Pick a file path from a fence language and the job target."""
    ext = LANGUAGE_EXTENSIONS.get(language, ".txt")
    stem = TARGET_STEMS.get(target, "generated")
    return f"{stem}{ext}"


def parse_generated_content(content: str, target: str) -> list[GeneratedFile]:
    """Extract one GeneratedFile per fenced code block in content.

    The first line inside a fence is read as its language tag.
    """
    files: list[GeneratedFile] = []
    blocks = content.split(FENCE)

    # Odd indices are the insides of fences
    for block in blocks[1::2]:
        lines = block.split("\n")
        language = lines[0].strip().lower()
        code = "\n".join(lines[1:])
        files.append(
            GeneratedFile(
                path=infer_file_path(language, target),
                content=code,
                language=language,
            )
        )

    return files
