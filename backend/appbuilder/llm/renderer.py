"""Per-target code templates for offline generation.

Each target renders exactly one file from a Jinja2 template that
interpolates the user's prompt. The same table backs the template catalog
served at GET /api/templates.
"""

from dataclasses import dataclass
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, meta

from appbuilder.queue.schemas import GeneratedFile, Target
from appbuilder.schemas.codegen import CodeTemplate

CODE_TEMPLATE_DIR = Path(__file__).parent / "templates"


@dataclass(frozen=True)
class TemplateSpec:
    template: str
    path: str
    language: str
    name: str
    description: str


TARGET_TEMPLATES: dict[str, TemplateSpec] = {
    Target.FRONTEND.value: TemplateSpec(
        "frontend.tsx.j2", "src/App.tsx", "tsx",
        "React Component", "React functional component with local state",
    ),
    Target.BACKEND.value: TemplateSpec(
        "backend.ts.j2", "api/service.ts", "typescript",
        "Encore.ts Service", "REST API endpoint with Encore.ts",
    ),
    Target.SQL.value: TemplateSpec(
        "sql.sql.j2", "schema.sql", "sql",
        "SQL Schema", "PostgreSQL table with timestamps and indexes",
    ),
    Target.INFRA.value: TemplateSpec(
        "infra.yml.j2", "infrastructure.yml", "yaml",
        "Docker Compose Stack", "Node.js app with a PostgreSQL service",
    ),
}


class CodeTemplateRenderer:
    """Render the starter file for a generation target."""

    def __init__(self):
        self.env = Environment(
            loader=FileSystemLoader(str(CODE_TEMPLATE_DIR)),
            autoescape=False,  # Source code must NOT be escaped
        )

    def render(self, prompt: str, target: str) -> list[GeneratedFile]:
        """Return the generated files for target (empty for an unknown target)."""
        entry = TARGET_TEMPLATES.get(target)
        if entry is None:
            return []

        content = self.env.get_template(entry.template).render(prompt=prompt)
        return [GeneratedFile(path=entry.path, content=content, language=entry.language)]

    def list_templates(self) -> list[CodeTemplate]:
        """Describe every target template, with the variables its source uses."""
        templates = []
        for target, entry in TARGET_TEMPLATES.items():
            source, _, _ = self.env.loader.get_source(self.env, entry.template)
            variables = sorted(meta.find_undeclared_variables(self.env.parse(source)))
            templates.append(
                CodeTemplate(
                    id=f"{target}-starter",
                    name=entry.name,
                    description=entry.description,
                    target=target,
                    language=entry.language,
                    path=entry.path,
                    template=entry.template,
                    variables=variables,
                )
            )
        return templates
