"""
Templating Context

Responsibilities:
- Manages resume structure representation (structured data model for resume documents)
- Converts structured resume data to LaTeX source
- Manages the Jinja2 LaTeX template system (redraft/contexts/templating/template/)
- Escapes free text and decides which sections and headings appear

Owns: Resume structure representation, structured data -> LaTeX conversion, LaTeX template system
Never: Compiles LaTeX or talks to the analysis service
"""

from redraft.contexts.templating.exceptions import (
    InvalidResumeStructureError,
    TemplateRenderError,
)
from redraft.contexts.templating.latex_generator import (
    ProjectHeadingLayout,
    ResumeToLaTeXConverter,
    generate_latex,
    select_project_heading_layout,
)
from redraft.contexts.templating.registries import TemplateRegistry
from redraft.contexts.templating.resume_data_structure import (
    BulletPoint,
    Education,
    Experience,
    PersonalInfo,
    Project,
    ResumeDocument,
    Skills,
    load_resume_document,
)

__all__ = [
    # Generation
    "generate_latex",
    "ResumeToLaTeXConverter",
    "ProjectHeadingLayout",
    "select_project_heading_layout",
    "TemplateRegistry",
    # Data structure classes
    "ResumeDocument",
    "PersonalInfo",
    "Education",
    "Skills",
    "Experience",
    "Project",
    "BulletPoint",
    "load_resume_document",
    # Errors
    "TemplateRenderError",
    "InvalidResumeStructureError",
]
