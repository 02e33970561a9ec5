"""
Keyword Extraction and Scoring Engine.

Extracts keyword sets from resume and job description text and scores how
many of the job description's keywords the resume covers.
"""

import re
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, List, Optional

from redraft.contexts.scoring.stopwords import STOPWORDS

MIN_KEYWORD_LENGTH = 3

_NON_ALPHANUMERIC = re.compile(r"[^a-z0-9\s]")
_WHITESPACE_RUN = re.compile(r"\s+")


@dataclass
class KeywordReport:
    """
    Keyword comparison between a resume and a job description.

    Attributes:
        resume_keywords: Keywords extracted from the resume
        jd_keywords: Keywords extracted from the job description
        matched_keywords: Job description keywords present in the resume
        missing_keywords: Job description keywords absent from the resume
        score: Percentage of job description keywords covered (0-100, 2 decimals)
    """

    resume_keywords: List[str] = field(default_factory=list)
    jd_keywords: List[str] = field(default_factory=list)
    matched_keywords: List[str] = field(default_factory=list)
    missing_keywords: List[str] = field(default_factory=list)
    score: float = 0.0


def normalize(text: Optional[str]) -> str:
    """
    Lowercase text and reduce it to alphanumeric words separated by single spaces.

    Args:
        text: Input text (None is treated as empty)

    Returns:
        Normalized text

    Example:
        >>> normalize("  Built C#/.NET APIs!  ")
        'built c net apis'
    """
    if not text:
        return ""
    lowered = text.lower()
    lowered = _NON_ALPHANUMERIC.sub(" ", lowered)
    return _WHITESPACE_RUN.sub(" ", lowered).strip()


def extract_keywords(text: Optional[str]) -> List[str]:
    """
    Extract significant keywords from text.

    Tokens shorter than three characters and stopwords are dropped, duplicates
    removed, and the result sorted.

    Args:
        text: Input text (None is treated as empty)

    Returns:
        Sorted list of distinct keywords
    """
    tokens = normalize(text).split()
    return sorted(
        {
            token
            for token in tokens
            if len(token) >= MIN_KEYWORD_LENGTH and token not in STOPWORDS
        }
    )


def round2(value: float) -> float:
    """Round half-up to exactly two decimal places."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


def match_score(resume_keywords: Iterable[str], jd_keywords: Iterable[str]) -> float:
    """
    Percentage of job description keywords found in the resume.

    The base is the job description keyword count, not the union, so the
    score is not symmetric.

    Args:
        resume_keywords: Keywords extracted from the resume
        jd_keywords: Keywords extracted from the job description

    Returns:
        Score between 0.0 and 100.0, rounded to two decimals
    """
    jd_set = set(jd_keywords or [])
    if not jd_set:
        return 0.0

    resume_set = set(resume_keywords or [])
    matches = len(jd_set & resume_set)
    return round2(100.0 * matches / len(jd_set))


def matched_keywords(resume_keywords: Iterable[str], jd_keywords: Iterable[str]) -> List[str]:
    """Job description keywords present in the resume, sorted."""
    return sorted(set(jd_keywords or []) & set(resume_keywords or []))


def missing_keywords(resume_keywords: Iterable[str], jd_keywords: Iterable[str]) -> List[str]:
    """Job description keywords absent from the resume, sorted."""
    return sorted(set(jd_keywords or []) - set(resume_keywords or []))


def score_keywords(resume_text: Optional[str], jd_text: Optional[str]) -> KeywordReport:
    """
    Compare a resume against a job description by keyword overlap.

    Args:
        resume_text: Raw resume text
        jd_text: Raw job description text

    Returns:
        KeywordReport with both keyword sets, their diff, and the score
    """
    resume_kw = extract_keywords(resume_text)
    jd_kw = extract_keywords(jd_text)

    return KeywordReport(
        resume_keywords=resume_kw,
        jd_keywords=jd_kw,
        matched_keywords=matched_keywords(resume_kw, jd_kw),
        missing_keywords=missing_keywords(resume_kw, jd_kw),
        score=match_score(resume_kw, jd_kw),
    )
