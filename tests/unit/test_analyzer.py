"""Unit tests for the analysis orchestrator."""

import json

import pytest

from redraft.contexts.analysis.analyzer import ResumeAnalyzer, build_keyword_suggestion
from redraft.contexts.analysis.exceptions import InvalidInputError
from redraft.contexts.analysis.prompts import JD_CHAR_LIMIT, RESUME_CHAR_LIMIT, build_prompt
from redraft.contexts.analysis.result_data_structure import SuggestionPriority, SuggestionType
from redraft.utils.llm import (
    MalformedUpstreamResponse,
    RetriesExhausted,
    RetryInterrupted,
    UpstreamRateLimited,
)
from tests.fakes import FakeProvider, RecordingEvent, gemini_envelope

RESUME = "Built Python services on Docker for Planet Express"
JOB = "We need Python, Docker and Kubernetes experience"


@pytest.fixture
def model_output(sample_resume_data):
    return json.dumps(
        {
            "analysis": {
                "matchScore": 64,
                "strengths": ["Relevant stack"],
                "matchKeywords": ["from", "the", "model"],
                "missingKeywords": ["model-says-this"],
            },
            "suggestions": [
                {"id": "s1", "type": "content", "suggestedText": "Add metrics", "priority": "high"}
            ],
            "resumeData": sample_resume_data,
        }
    )


# --- Prompt ---


@pytest.mark.unit
def test_build_prompt_embeds_inputs_and_missing_keywords():
    prompt = build_prompt("my resume", "the job", ["kubernetes", "terraform"])

    assert "my resume" in prompt
    assert "the job" in prompt
    assert "**Missing Keywords Detected**: kubernetes, terraform" in prompt
    assert '"resumeData"' in prompt
    assert '"matchScore"' in prompt


@pytest.mark.unit
@pytest.mark.parametrize("missing", [None, []])
def test_build_prompt_without_missing_keywords(missing):
    assert "**Missing Keywords Detected**: None" in build_prompt("r", "j", missing)


@pytest.mark.unit
def test_build_prompt_truncates_inputs():
    resume = "R" * (RESUME_CHAR_LIMIT + 500)
    job = "J" * (JD_CHAR_LIMIT + 500)

    prompt = build_prompt(resume, job)

    assert "R" * RESUME_CHAR_LIMIT in prompt
    assert "R" * (RESUME_CHAR_LIMIT + 1) not in prompt
    assert "J" * JD_CHAR_LIMIT in prompt
    assert "J" * (JD_CHAR_LIMIT + 1) not in prompt


# --- Keyword suggestion ---


@pytest.mark.unit
def test_build_keyword_suggestion():
    suggestion = build_keyword_suggestion(["kubernetes", "terraform"], position=3)

    assert suggestion.id == "suggestion-3"
    assert suggestion.type is SuggestionType.CONTENT
    assert suggestion.priority is SuggestionPriority.MEDIUM
    assert suggestion.original_text == ""
    assert "kubernetes, terraform" in suggestion.suggested_text
    assert (suggestion.start_index, suggestion.end_index) == (-1, -1)


@pytest.mark.unit
def test_build_keyword_suggestion_empty():
    assert build_keyword_suggestion([]) is None


# --- Orchestration ---


@pytest.mark.unit
def test_analyze_merges_deterministic_keywords(model_output):
    provider = FakeProvider(gemini_envelope(model_output))
    result = ResumeAnalyzer(provider).analyze(RESUME, JOB)

    # Model keyword lists are replaced by the keyword engine's
    assert result.analysis.match_keywords == ("docker", "python")
    assert result.analysis.jd_keywords == ("docker", "kubernetes", "need", "python")
    assert result.analysis.missing_keywords == ("kubernetes", "need")
    assert result.keyword_score == 50.0

    # Model score and strengths are kept
    assert result.score == 64.0
    assert result.analysis.strengths == ("Relevant stack",)
    assert result.resume_text == RESUME


@pytest.mark.unit
def test_analyze_appends_keyword_suggestion_last(model_output):
    result = ResumeAnalyzer(FakeProvider(gemini_envelope(model_output))).analyze(RESUME, JOB)

    assert [s.id for s in result.suggestions] == ["s1", "suggestion-2"]
    assert "kubernetes, need" in result.suggestions[-1].suggested_text


@pytest.mark.unit
def test_analyze_without_missing_keywords_adds_no_suggestion(model_output):
    result = ResumeAnalyzer(FakeProvider(gemini_envelope(model_output))).analyze(
        "Python and Docker", "Python Docker"
    )

    assert [s.id for s in result.suggestions] == ["s1"]
    assert result.keyword_score == 100.0


@pytest.mark.unit
def test_analyze_sends_missing_keywords_in_prompt(model_output):
    provider = FakeProvider(gemini_envelope(model_output))
    ResumeAnalyzer(provider).analyze(RESUME, JOB)

    assert len(provider.prompts) == 1
    assert "**Missing Keywords Detected**: kubernetes, need" in provider.prompts[0]


@pytest.mark.unit
def test_analyze_passes_cancel_event(model_output):
    provider = FakeProvider(gemini_envelope(model_output))
    event = RecordingEvent()

    ResumeAnalyzer(provider).analyze(RESUME, JOB, cancel_event=event)
    assert provider.cancel_events == [event]


@pytest.mark.unit
def test_analyze_cancelled_before_the_call_never_reaches_the_api(model_output):
    provider = FakeProvider(gemini_envelope(model_output))

    with pytest.raises(RetryInterrupted):
        ResumeAnalyzer(provider).analyze(RESUME, JOB, cancel_event=RecordingEvent(initially_set=True))
    assert provider.prompts == []


@pytest.mark.unit
def test_analyze_retries_rate_limits_through_the_provider(model_output):
    class FlakyProvider(FakeProvider):
        def _call_api(self, prompt):
            if not self.prompts:
                self.prompts.append(prompt)
                raise UpstreamRateLimited("429")
            return super()._call_api(prompt)

    provider = FlakyProvider(gemini_envelope(model_output))
    event = RecordingEvent()

    result = ResumeAnalyzer(provider).analyze(RESUME, JOB, cancel_event=event)

    assert result.score == 64.0
    assert len(provider.prompts) == 2
    assert event.waits == [2.0]


@pytest.mark.unit
@pytest.mark.parametrize(
    "resume, job",
    [(None, JOB), ("", JOB), ("   \n", JOB), (RESUME, None), (RESUME, ""), (RESUME, "\t")],
)
def test_analyze_rejects_blank_inputs_before_calling_provider(resume, job):
    provider = FakeProvider(gemini_envelope("{}"))

    with pytest.raises(InvalidInputError):
        ResumeAnalyzer(provider).analyze(resume, job)
    assert provider.prompts == []


@pytest.mark.unit
def test_invalid_input_is_a_value_error():
    assert issubclass(InvalidInputError, ValueError)


@pytest.mark.unit
def test_analyze_propagates_upstream_errors():
    error = RetriesExhausted(3, UpstreamRateLimited("429"))

    with pytest.raises(RetriesExhausted):
        ResumeAnalyzer(FakeProvider(error)).analyze(RESUME, JOB)


@pytest.mark.unit
def test_analyze_malformed_envelope():
    with pytest.raises(MalformedUpstreamResponse):
        ResumeAnalyzer(FakeProvider({"candidates": []})).analyze(RESUME, JOB)


@pytest.mark.unit
def test_analyze_is_idempotent(model_output):
    analyzer = ResumeAnalyzer(FakeProvider(gemini_envelope(model_output)))

    assert analyzer.analyze(RESUME, JOB) == analyzer.analyze(RESUME, JOB)
