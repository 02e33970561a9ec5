"""
LaTeX Generator

Converts a structured ResumeDocument to a LaTeX document.

Sections are emitted in a fixed order (personal info, education, skills,
experience, projects) and only when they have content. Every free-text field
is escaped; URLs are inserted as-is.
"""

from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from jinja2 import Template, TemplateError

from redraft.contexts.templating.exceptions import TemplateRenderError
from redraft.contexts.templating.logger import _log_debug
from redraft.contexts.templating.registries import TemplateRegistry
from redraft.contexts.templating.resume_data_structure import (
    BulletPoint,
    Education,
    Experience,
    PersonalInfo,
    Project,
    ResumeDocument,
    Skills,
)
from redraft.utils.latex_escape import escape_latex


class ProjectHeadingLayout(Enum):
    """Heading variants for a project entry; values name the template type."""

    DETAILED = "project_heading_detailed"
    COMPACT = "project_heading_compact"


def select_project_heading_layout(project: Project) -> ProjectHeadingLayout:
    """Two-line heading when the project has a summary or location, one line otherwise."""
    if project.summary or project.location:
        return ProjectHeadingLayout.DETAILED
    return ProjectHeadingLayout.COMPACT


class ResumeToLaTeXConverter:
    """Converts a ResumeDocument to LaTeX format."""

    def __init__(self, template_registry: TemplateRegistry = None):
        self.template_registry = template_registry or TemplateRegistry()

    def _render(self, template: Template, type_name: str, **context: Any) -> str:
        try:
            return template.render(**context)
        except TemplateError as e:
            raise TemplateRenderError(
                "Failed to render LaTeX template",
                type_name=type_name,
                template_path=Path(template.filename) if template.filename else None,
                original_error=e,
            ) from e

    def _render_type(self, type_name: str, **context: Any) -> str:
        """Render a component template, dropping its trailing newline."""
        try:
            template = self.template_registry.get_template(type_name)
        except TemplateError as e:
            raise TemplateRenderError(
                "Failed to load LaTeX template",
                type_name=type_name,
                template_path=self.template_registry.get_template_path(type_name),
                original_error=e,
            ) from e
        return self._render(template, type_name, **context).rstrip("\n")

    def _render_structure(self, name: str, **context: Any) -> str:
        try:
            template = self.template_registry.get_structure_template(name)
        except TemplateError as e:
            raise TemplateRenderError(f"Failed to load structure template '{name}'", original_error=e) from e
        return self._render(template, name, **context)

    def convert_personal_info(self, info: Optional[PersonalInfo]) -> Optional[str]:
        """
        Convert the contact header to LaTeX.

        Args:
            info: Personal info, or None to omit the header

        Returns:
            LaTeX center block, or None
        """
        if info is None:
            return None

        return self._render_type(
            "personal_info",
            name=escape_latex(info.name),
            phone=escape_latex(info.phone),
            email=escape_latex(info.email),
            email_link=info.email or "",
            linkedin=info.linkedin or "",
            portfolio=info.portfolio or "",
        )

    def convert_education(self, education: List[Education]) -> Optional[str]:
        """Convert education entries to an EDUCATION section, or None if there are none."""
        if not education:
            return None

        entries = [
            {
                "school": escape_latex(entry.school),
                "date": escape_latex(entry.date),
                "degree": escape_latex(entry.degree),
                "gpa": escape_latex(entry.gpa),
            }
            for entry in education
        ]
        return self._render_type("education", entries=entries)

    def convert_skills(self, skills: Optional[Skills]) -> Optional[str]:
        """
        Convert skill lines to a SKILLS section.

        A line is emitted for every field that is not None; the section is
        omitted when all three fields are empty.
        """
        if skills is None or skills.is_empty():
            return None

        rows = [
            {"label": label, "value": escape_latex(value)}
            for label, value in (
                ("Languages", skills.languages),
                ("Frameworks", skills.frameworks),
                ("Tools", skills.tools),
            )
            if value is not None
        ]
        return self._render_type("skills", rows=rows)

    def convert_bullet_points(self, bullet_points: List[BulletPoint]) -> str:
        """
        Convert bullet points to an item list.

        Each bullet contributes its accepted text (improved if accepted, else
        original). Returns an empty string when there are no bullets.
        """
        if not bullet_points:
            return ""
        items = [escape_latex(bp.text) for bp in bullet_points]
        return self._render_type("bullet_list", items=items)

    def convert_experience(self, experience: List[Experience]) -> Optional[str]:
        """Convert work experience entries to an INDUSTRIAL EXPERIENCE section."""
        if not experience:
            return None

        entries = [
            {
                "title": escape_latex(entry.title),
                "company": escape_latex(entry.company),
                "date": escape_latex(entry.date),
                "summary": escape_latex(entry.summary),
                "location": escape_latex(entry.location),
                "bullets": self.convert_bullet_points(entry.bullet_points),
            }
            for entry in experience
        ]
        return self._render_type("experience", entries=entries)

    def convert_project_heading(self, project: Project) -> str:
        """Render a project heading using the layout its data calls for."""
        layout = select_project_heading_layout(project)
        return self._render_type(
            layout.value,
            title=escape_latex(project.title),
            date=escape_latex(project.date),
            summary=escape_latex(project.summary),
            location=escape_latex(project.location),
        )

    def convert_projects(self, projects: List[Project]) -> Optional[str]:
        """Convert project entries to a PROJECTS section."""
        if not projects:
            return None

        entries = [
            {
                "heading": self.convert_project_heading(project),
                "bullets": self.convert_bullet_points(project.bullet_points),
            }
            for project in projects
        ]
        return self._render_type("projects", entries=entries)

    def generate_preamble(self) -> str:
        """Fixed preamble: packages, margins and layout macros."""
        return self._render_structure("preamble").rstrip("\n")

    def generate_document(self, document: ResumeDocument) -> str:
        """
        Generate complete LaTeX document from a ResumeDocument.

        Args:
            document: Structured resume

        Returns:
            Complete LaTeX document string
        """
        candidates = [
            ("personal_info", self.convert_personal_info(document.personal_info)),
            ("education", self.convert_education(document.education)),
            ("skills", self.convert_skills(document.skills)),
            ("experience", self.convert_experience(document.experience)),
            ("projects", self.convert_projects(document.projects)),
        ]
        sections = [latex for _, latex in candidates if latex]
        _log_debug(f"Rendering sections: {[name for name, latex in candidates if latex]}")

        return self._render_structure(
            "document", preamble=self.generate_preamble(), sections=sections
        )


def generate_latex(document: ResumeDocument, template_registry: TemplateRegistry = None) -> str:
    """
    Render a ResumeDocument to LaTeX source.

    Args:
        document: Structured resume
        template_registry: Optional registry (defaults to the packaged templates)

    Returns:
        LaTeX document text
    """
    return ResumeToLaTeXConverter(template_registry).generate_document(document)
