"""
Analysis Result Structure

Defines the structured result of analyzing a resume against a job
description: the scored analysis, ordered rewrite suggestions and the
structured resume extracted by the model.

Analysis and Suggestion are frozen; derive updated copies with
dataclasses.replace.
"""

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple

from redraft.contexts.scoring.keyword_engine import round2
from redraft.contexts.templating.exceptions import InvalidResumeStructureError
from redraft.contexts.templating.resume_data_structure import (
    ResumeDocument,
    require_mapping,
    read_mapping,
    read_records,
    read_text,
)

NOT_APPLICABLE_INDEX = -1


class SuggestionType(Enum):
    CONTENT = "content"
    FORMATTING = "formatting"
    GRAMMAR = "grammar"


class SuggestionPriority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def _read_text_item(value: Any) -> str:
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise InvalidResumeStructureError(f"List item must be text, got {type(value).__name__}")


def _read_text_tuple(data: Dict[str, Any], key: str) -> Tuple[str, ...]:
    return tuple(read_records(data, key, _read_text_item))


def _read_number(data: Dict[str, Any], key: str) -> float:
    value = data.get(key)
    if value is None:
        raise InvalidResumeStructureError(f"Missing required number '{key}'")
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidResumeStructureError(
            f"Field '{key}' must be a number, got {type(value).__name__}"
        )
    if not math.isfinite(value):
        raise InvalidResumeStructureError(f"Field '{key}' must be finite, got {value}")
    return float(value)


def _read_index(data: Dict[str, Any], key: str) -> int:
    value = data.get(key)
    if value is None:
        return NOT_APPLICABLE_INDEX
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidResumeStructureError(
            f"Field '{key}' must be an integer, got {type(value).__name__}"
        )
    return value


def _read_enum(data: Dict[str, Any], key: str, enum_cls, default):
    value = data.get(key)
    if value is None:
        return default
    normalized = str(value).strip().lower()
    if not normalized:
        return default
    try:
        return enum_cls(normalized)
    except ValueError as e:
        allowed = ", ".join(member.value for member in enum_cls)
        raise InvalidResumeStructureError(
            f"Field '{key}' must be one of: {allowed} (got {value!r})"
        ) from e


@dataclass(frozen=True)
class Analysis:
    """
    Scored comparison of a resume against a job description.

    Attributes:
        match_score: Model-assigned fit score, 0-100 with two decimals
        strengths: What the resume already does well
        match_keywords: Job description keywords present in the resume
        jd_keywords: Keywords extracted from the job description
        missing_keywords: Job description keywords absent from the resume
    """

    match_score: float
    strengths: Tuple[str, ...] = ()
    match_keywords: Tuple[str, ...] = ()
    jd_keywords: Tuple[str, ...] = ()
    missing_keywords: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Any) -> "Analysis":
        """
        Raises:
            InvalidResumeStructureError: If matchScore is missing, not a
                number or outside 0-100, or a keyword list has the wrong shape
        """
        data = require_mapping(data, "Analysis")
        score = _read_number(data, "matchScore")
        if not 0.0 <= score <= 100.0:
            raise InvalidResumeStructureError(f"matchScore must be between 0 and 100, got {score}")
        return cls(
            match_score=round2(score),
            strengths=_read_text_tuple(data, "strengths"),
            match_keywords=_read_text_tuple(data, "matchKeywords"),
            jd_keywords=_read_text_tuple(data, "jdKeywords"),
            missing_keywords=_read_text_tuple(data, "missingKeywords"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "matchScore": self.match_score,
            "strengths": list(self.strengths),
            "matchKeywords": list(self.match_keywords),
            "jdKeywords": list(self.jd_keywords),
            "missingKeywords": list(self.missing_keywords),
        }


@dataclass(frozen=True)
class Suggestion:
    """
    One proposed edit.

    start_index and end_index locate original_text in the resume text, or
    are -1 when the suggestion is not tied to a span.
    """

    id: str
    type: SuggestionType = SuggestionType.CONTENT
    original_text: str = ""
    suggested_text: str = ""
    start_index: int = NOT_APPLICABLE_INDEX
    end_index: int = NOT_APPLICABLE_INDEX
    reason: str = ""
    priority: SuggestionPriority = SuggestionPriority.MEDIUM

    @classmethod
    def from_dict(cls, data: Any, position: int = 1) -> "Suggestion":
        """
        Build a Suggestion from its camelCase JSON form.

        Args:
            data: Suggestion object
            position: 1-based position in the list, used for a missing id
        """
        data = require_mapping(data, "Suggestion")
        return cls(
            id=read_text(data, "id") or f"suggestion-{position}",
            type=_read_enum(data, "type", SuggestionType, SuggestionType.CONTENT),
            original_text=read_text(data, "originalText") or "",
            suggested_text=read_text(data, "suggestedText") or "",
            start_index=_read_index(data, "startIndex"),
            end_index=_read_index(data, "endIndex"),
            reason=read_text(data, "reason") or "",
            priority=_read_enum(data, "priority", SuggestionPriority, SuggestionPriority.MEDIUM),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "originalText": self.original_text,
            "suggestedText": self.suggested_text,
            "startIndex": self.start_index,
            "endIndex": self.end_index,
            "reason": self.reason,
            "priority": self.priority.value,
        }


def read_suggestions(data: Dict[str, Any], key: str = "suggestions") -> List[Suggestion]:
    """Read the suggestion list, numbering entries that arrive without an id."""
    raw = read_records(data, key, lambda item: item)
    return [Suggestion.from_dict(item, position) for position, item in enumerate(raw, 1)]


@dataclass
class AnalysisResult:
    """
    Complete result of one analysis request.

    Attributes:
        resume_text: Original, untruncated resume text
        analysis: Scored analysis
        suggestions: Suggestions in presentation order
        resume_data: Structured resume extracted by the model
        score: Copy of analysis.match_score
        keyword_score: Deterministic keyword-overlap score (None until computed)
    """

    resume_text: str
    analysis: Analysis
    resume_data: ResumeDocument
    suggestions: List[Suggestion] = field(default_factory=list)
    score: float = 0.0
    keyword_score: Optional[float] = None

    @classmethod
    def from_dict(cls, data: Any) -> "AnalysisResult":
        """
        Build an AnalysisResult from its camelCase JSON form.

        analysis and resumeData are required; suggestions defaults to empty.
        """
        data = require_mapping(data, "Analysis result")
        analysis = Analysis.from_dict(read_mapping(data, "analysis", required=True))
        keyword_score = data.get("keywordScore")
        if keyword_score is not None:
            keyword_score = _read_number(data, "keywordScore")
        return cls(
            resume_text=read_text(data, "resumeText") or "",
            analysis=analysis,
            resume_data=ResumeDocument.from_dict(read_mapping(data, "resumeData", required=True)),
            suggestions=read_suggestions(data),
            score=analysis.match_score,
            keyword_score=keyword_score,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resumeText": self.resume_text,
            "analysis": self.analysis.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "resumeData": self.resume_data.to_dict(),
            "score": self.score,
            "keywordScore": self.keyword_score,
        }
