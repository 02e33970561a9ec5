"""
Resume Analysis Orchestrator

Runs one analysis request end to end: deterministic keyword scoring, prompt
construction, the LLM call (with bounded, cancellable retry), response
parsing, and merging the deterministic keyword results into the parsed
analysis.
"""

import threading
from dataclasses import replace
from typing import List, Optional

from redraft.contexts.analysis.exceptions import InvalidInputError
from redraft.contexts.analysis.logger import _log_debug, _log_info, _log_success
from redraft.contexts.analysis.prompts import build_prompt
from redraft.contexts.analysis.response_parser import parse_result
from redraft.contexts.analysis.result_data_structure import (
    AnalysisResult,
    Suggestion,
    SuggestionPriority,
    SuggestionType,
)
from redraft.contexts.scoring.keyword_engine import score_keywords
from redraft.utils.llm import LLMProvider, get_provider


def build_keyword_suggestion(keywords: List[str], position: int = 1) -> Optional[Suggestion]:
    """
    Group missing job description keywords into a single content suggestion.

    Args:
        keywords: Missing keywords, in the order they should be listed
        position: 1-based position the suggestion will take, used for its id

    Returns:
        Suggestion, or None when there are no keywords
    """
    if not keywords:
        return None

    return Suggestion(
        id=f"suggestion-{position}",
        type=SuggestionType.CONTENT,
        original_text="",
        suggested_text=f"Highlight or add these JD keywords in relevant sections: {', '.join(keywords)}",
        reason=(
            "These job description keywords are missing from the resume. "
            "Add them in context to boost ATS alignment."
        ),
        priority=SuggestionPriority.MEDIUM,
    )


def _require_text(value: Optional[str], name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise InvalidInputError(f"{name} is required and must not be blank")
    return value


class ResumeAnalyzer:
    """
    Analyzes a resume against a job description.

    Holds no per-request state, so one instance can serve concurrent
    requests. Caching is the caller's concern (see analyze_with_cache).
    """

    def __init__(self, provider: LLMProvider = None):
        """
        Args:
            provider: LLM provider (default: from get_provider())
        """
        self.provider = provider or get_provider()

    def analyze(
        self,
        resume_text: str,
        job_description: str,
        cancel_event: Optional[threading.Event] = None,
    ) -> AnalysisResult:
        """
        Analyze a resume against a job description.

        Args:
            resume_text: Extracted resume text
            job_description: Job description text
            cancel_event: Set to abort the request while it waits to retry

        Returns:
            AnalysisResult with deterministic keyword lists and keyword_score

        Raises:
            InvalidInputError: If either input is missing or blank
            UpstreamError: If the LLM call or its response fails
        """
        resume_text = _require_text(resume_text, "Resume text")
        job_description = _require_text(job_description, "Job description")

        report = score_keywords(resume_text, job_description)
        _log_info(
            f"Keyword score {report.score:.2f} "
            f"({len(report.matched_keywords)}/{len(report.jd_keywords)} JD keywords matched)"
        )

        prompt = build_prompt(resume_text, job_description, report.missing_keywords)
        _log_debug(f"Prompt length: {len(prompt)} chars")

        response = self.provider.generate(prompt, cancel_event=cancel_event)
        if response.input_tokens is not None:
            _log_debug(
                f"{response.model} usage: {response.input_tokens} prompt tokens, "
                f"{response.output_tokens} output tokens"
            )
        result = parse_result(response.content, resume_text)

        # Keyword lists come from the deterministic engine, not the model
        result.analysis = replace(
            result.analysis,
            match_keywords=tuple(report.matched_keywords),
            jd_keywords=tuple(report.jd_keywords),
            missing_keywords=tuple(report.missing_keywords),
        )
        result.keyword_score = report.score

        keyword_suggestion = build_keyword_suggestion(
            report.missing_keywords, position=len(result.suggestions) + 1
        )
        if keyword_suggestion is not None:
            result.suggestions.append(keyword_suggestion)

        _log_success(
            f"Analysis complete: match score {result.score:.2f}, "
            f"{len(result.suggestions)} suggestions"
        )
        return result
