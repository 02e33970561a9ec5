"""
Scoring Context

Responsibilities:
- Normalizes and tokenizes resume and job description text
- Extracts sorted, de-duplicated keyword sets
- Scores keyword overlap against the job description
- Reports which job description keywords the resume is missing

Owns: Deterministic keyword scoring
Never: Calls external services or touches the filesystem
"""

from redraft.contexts.scoring.keyword_engine import (
    KeywordReport,
    extract_keywords,
    match_score,
    matched_keywords,
    missing_keywords,
    normalize,
    score_keywords,
)

__all__ = [
    "KeywordReport",
    "extract_keywords",
    "match_score",
    "matched_keywords",
    "missing_keywords",
    "normalize",
    "score_keywords",
]
