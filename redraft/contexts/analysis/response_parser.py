"""
Response parsing for resume analysis.

Turns the model's text output into an AnalysisResult. Any failure here is a
MalformedUpstreamResponse and is never retried.
"""

import json

from redraft.contexts.analysis.logger import _log_debug, _log_error
from redraft.contexts.analysis.result_data_structure import AnalysisResult
from redraft.contexts.templating.exceptions import InvalidResumeStructureError
from redraft.utils.llm import MalformedUpstreamResponse, snippet, extract_json_block


def parse_result(raw_text: str, resume_text: str) -> AnalysisResult:
    """
    Parse model output into an AnalysisResult.

    Strips code fences and surrounding prose, decodes the JSON object, and
    builds the result models. Unknown fields are ignored. The original resume
    text is re-attached and score is copied from analysis.matchScore.

    Args:
        raw_text: Model output text
        resume_text: Original, untruncated resume text

    Returns:
        AnalysisResult (keyword_score is left unset)

    Raises:
        MalformedUpstreamResponse: If there is no JSON object, it does not
            decode, or required fields are missing or mis-shaped
    """
    candidate = extract_json_block(raw_text)

    try:
        payload = json.loads(candidate)
    except json.JSONDecodeError as e:
        _log_error(f"Model output is not valid JSON: {e}")
        raise MalformedUpstreamResponse(f"Model output is not valid JSON: {e}", raw=snippet(raw_text)) from e

    if not isinstance(payload, dict):
        raise MalformedUpstreamResponse("Model output is not a JSON object", raw=snippet(raw_text))

    # Fields computed locally always come from the caller, never the model
    payload = {**payload, "resumeText": resume_text}
    payload.pop("keywordScore", None)

    try:
        result = AnalysisResult.from_dict(payload)
    except InvalidResumeStructureError as e:
        _log_error(f"Model output has the wrong shape: {e}")
        raise MalformedUpstreamResponse(f"Model output has the wrong shape: {e}", raw=snippet(raw_text)) from e

    _log_debug(
        f"Parsed analysis: score={result.score}, {len(result.suggestions)} suggestions, "
        f"{len(result.resume_data.experience)} experience entries"
    )
    return result
