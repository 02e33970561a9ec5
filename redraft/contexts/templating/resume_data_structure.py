"""
Resume Document Structure

Defines the structured representation of a resume that the analysis context
produces and the LaTeX generator consumes. Field names on the wire are
camelCase; attributes are snake_case.

List order is rendering order. A bullet point renders its improved text only
once the edit has been accepted.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeVar

from omegaconf import OmegaConf

from redraft.contexts.templating.exceptions import InvalidResumeStructureError

R = TypeVar("R")


# --- Field readers ---


def read_text(data: Dict[str, Any], key: str) -> Optional[str]:
    """
    Read an optional text field.

    Numbers are stringified (e.g. a GPA of 3.8); other non-text values raise.
    """
    value = data.get(key)
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise InvalidResumeStructureError(
        f"Field '{key}' must be text, got {type(value).__name__}"
    )


def read_mapping(data: Dict[str, Any], key: str, required: bool = False) -> Optional[Dict[str, Any]]:
    """Read a nested object field."""
    value = data.get(key)
    if value is None:
        if required:
            raise InvalidResumeStructureError(f"Missing required object '{key}'")
        return None
    if not isinstance(value, dict):
        raise InvalidResumeStructureError(
            f"Field '{key}' must be an object, got {type(value).__name__}"
        )
    return value


def read_records(
    data: Dict[str, Any], key: str, factory: Callable[[Any], R]
) -> List[R]:
    """Read a list field, building each element with factory. Missing or null means empty."""
    value = data.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise InvalidResumeStructureError(
            f"Field '{key}' must be a list, got {type(value).__name__}"
        )
    return [factory(item) for item in value]


def require_mapping(value: Any, what: str) -> Dict[str, Any]:
    if not isinstance(value, dict):
        raise InvalidResumeStructureError(f"{what} must be an object, got {type(value).__name__}")
    return value


# --- Components ---


@dataclass
class BulletPoint:
    """
    One achievement line with its original and possibly improved wording.

    Attributes:
        original: Text as extracted from the source resume
        improved: Suggested rewrite
        accepted: Whether the rewrite replaces the original in output
    """

    original: str = ""
    improved: str = ""
    accepted: bool = False

    @property
    def text(self) -> str:
        """Text that appears in the rendered resume."""
        return self.improved if self.accepted else self.original

    @classmethod
    def from_dict(cls, data: Any) -> "BulletPoint":
        # A bare string is an unedited bullet
        if isinstance(data, str):
            return cls(original=data)
        data = require_mapping(data, "Bullet point")

        accepted = data.get("accepted", False)
        if accepted is None:
            accepted = False
        if not isinstance(accepted, bool):
            raise InvalidResumeStructureError(
                f"Field 'accepted' must be a boolean, got {type(accepted).__name__}"
            )
        return cls(
            original=read_text(data, "original") or "",
            improved=read_text(data, "improved") or "",
            accepted=accepted,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"original": self.original, "improved": self.improved, "accepted": self.accepted}


@dataclass
class PersonalInfo:
    """Contact header. LinkedIn and portfolio URLs are optional."""

    name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    linkedin: Optional[str] = None
    portfolio: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "PersonalInfo":
        data = require_mapping(data, "Personal info")
        return cls(
            name=read_text(data, "name"),
            phone=read_text(data, "phone"),
            email=read_text(data, "email"),
            linkedin=read_text(data, "linkedin"),
            portfolio=read_text(data, "portfolio"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "phone": self.phone,
            "email": self.email,
            "linkedin": self.linkedin,
            "portfolio": self.portfolio,
        }


@dataclass
class Education:
    school: Optional[str] = None
    date: Optional[str] = None
    degree: Optional[str] = None
    gpa: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "Education":
        data = require_mapping(data, "Education entry")
        return cls(
            school=read_text(data, "school"),
            date=read_text(data, "date"),
            degree=read_text(data, "degree"),
            gpa=read_text(data, "gpa"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"school": self.school, "date": self.date, "degree": self.degree, "gpa": self.gpa}


@dataclass
class Skills:
    """Comma-style free-text skill lines."""

    languages: Optional[str] = None
    frameworks: Optional[str] = None
    tools: Optional[str] = None

    def is_empty(self) -> bool:
        return not (self.languages or self.frameworks or self.tools)

    @classmethod
    def from_dict(cls, data: Any) -> "Skills":
        data = require_mapping(data, "Skills")
        return cls(
            languages=read_text(data, "languages"),
            frameworks=read_text(data, "frameworks"),
            tools=read_text(data, "tools"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"languages": self.languages, "frameworks": self.frameworks, "tools": self.tools}


@dataclass
class Experience:
    title: Optional[str] = None
    company: Optional[str] = None
    date: Optional[str] = None
    location: Optional[str] = None
    summary: Optional[str] = None
    bullet_points: List[BulletPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Experience":
        data = require_mapping(data, "Experience entry")
        return cls(
            title=read_text(data, "title"),
            company=read_text(data, "company"),
            date=read_text(data, "date"),
            location=read_text(data, "location"),
            summary=read_text(data, "summary"),
            bullet_points=read_records(data, "bulletPoints", BulletPoint.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "company": self.company,
            "date": self.date,
            "location": self.location,
            "summary": self.summary,
            "bulletPoints": [bp.to_dict() for bp in self.bullet_points],
        }


@dataclass
class Project:
    title: Optional[str] = None
    link: Optional[str] = None
    date: Optional[str] = None
    summary: Optional[str] = None
    location: Optional[str] = None
    bullet_points: List[BulletPoint] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "Project":
        data = require_mapping(data, "Project entry")
        return cls(
            title=read_text(data, "title"),
            link=read_text(data, "link"),
            date=read_text(data, "date"),
            summary=read_text(data, "summary"),
            location=read_text(data, "location"),
            bullet_points=read_records(data, "bulletPoints", BulletPoint.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "date": self.date,
            "summary": self.summary,
            "location": self.location,
            "bulletPoints": [bp.to_dict() for bp in self.bullet_points],
        }


@dataclass
class ResumeDocument:
    """
    Structured resume.

    Attributes:
        personal_info: Contact header (None omits the header)
        education: Education entries in display order
        skills: Skill lines (None or all-empty omits the section)
        experience: Work experience entries in display order
        projects: Project entries in display order
    """

    personal_info: Optional[PersonalInfo] = None
    education: List[Education] = field(default_factory=list)
    skills: Optional[Skills] = None
    experience: List[Experience] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Any) -> "ResumeDocument":
        """
        Build a ResumeDocument from its camelCase JSON form.

        Raises:
            InvalidResumeStructureError: If any field has the wrong shape
        """
        data = require_mapping(data, "Resume data")
        personal_info = read_mapping(data, "personalInfo")
        skills = read_mapping(data, "skills")
        return cls(
            personal_info=PersonalInfo.from_dict(personal_info) if personal_info is not None else None,
            education=read_records(data, "education", Education.from_dict),
            skills=Skills.from_dict(skills) if skills is not None else None,
            experience=read_records(data, "experience", Experience.from_dict),
            projects=read_records(data, "projects", Project.from_dict),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "personalInfo": self.personal_info.to_dict() if self.personal_info else None,
            "education": [entry.to_dict() for entry in self.education],
            "skills": self.skills.to_dict() if self.skills else None,
            "experience": [entry.to_dict() for entry in self.experience],
            "projects": [entry.to_dict() for entry in self.projects],
        }


def load_resume_document(path: Path) -> ResumeDocument:
    """
    Load a ResumeDocument from a YAML or JSON file.

    Accepts either the bare resume object or a saved analysis result with the
    resume under a "resumeData" key.

    Args:
        path: Path to .yaml/.yml/.json file

    Returns:
        Parsed ResumeDocument
    """
    # Resume text may contain "${...}"; keep it literal
    data = OmegaConf.to_container(OmegaConf.load(Path(path)), resolve=False)
    if isinstance(data, dict) and "resumeData" in data:
        data = data["resumeData"]
    return ResumeDocument.from_dict(data)
