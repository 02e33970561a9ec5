"""
Analysis Context

Responsibilities:
- Validates analysis requests
- Builds the analysis prompt from resume text, job description and missing keywords
- Calls the LLM and parses its JSON output into structured results
- Merges deterministic keyword results into the parsed analysis
- Caches results per (document, job description)

Owns: Analysis orchestration, analysis result model, result cache
Never: Renders LaTeX or compiles documents
"""

from redraft.contexts.analysis.analyzer import ResumeAnalyzer, build_keyword_suggestion
from redraft.contexts.analysis.cache import AnalysisCache, analyze_with_cache, cache_key
from redraft.contexts.analysis.exceptions import InvalidInputError
from redraft.contexts.analysis.prompts import build_prompt
from redraft.contexts.analysis.response_parser import parse_result
from redraft.contexts.analysis.result_data_structure import (
    Analysis,
    AnalysisResult,
    Suggestion,
    SuggestionPriority,
    SuggestionType,
)

__all__ = [
    # Orchestration
    "ResumeAnalyzer",
    "build_prompt",
    "parse_result",
    "build_keyword_suggestion",
    # Cache
    "AnalysisCache",
    "analyze_with_cache",
    "cache_key",
    # Data structure classes
    "Analysis",
    "AnalysisResult",
    "Suggestion",
    "SuggestionType",
    "SuggestionPriority",
    # Errors
    "InvalidInputError",
]
