"""
Prompt construction for resume analysis.

The prompt pins the exact JSON schema the response parser expects, so the
two must change together.
"""

from typing import List, Optional

RESUME_CHAR_LIMIT = 10000
JD_CHAR_LIMIT = 5000

# =============================================================================
# PROMPT TEMPLATE
# =============================================================================

_ANALYSIS_PROMPT_TEMPLATE = """\
You are an expert Resume Analyzer and Career Coach. Validate the resume against the Job Description (JD).

**Core Logic**:
1. **Match Score**: 0-100 based on keyword overlap, STAR method usage, and relevance.
2. **Missing Keywords**: Identify critical tech/skills in JD absent in Resume.
3. **Suggestions**: Provide specific, actionable rewrites. Focus on quantifying impact (numbers, %) and using correct keywords.
4. **Resume Data**: Extract the resume into the structured resumeData object.

**Extraction Rules**:
- Do NOT delete content. Every bullet in the resume must appear in resumeData.
- Copy bullet text verbatim into "original". Do not invent bullets or summaries.
- Put a STAR-method rewrite of each bullet in "improved" and set "accepted" to false.
- Use "" for any field that is absent in the resume.
- Keyword lists must not contain locations, dates, or generic words.

IMPORTANT: Do NOT use the example values. Calculate specific scores and insights for THIS resume.

**Missing Keywords Detected**: {missing_keywords}

**Resume Text**:
{resume_text}

**Job Description**:
{job_description}

**OUTPUT FORMAT**:
Return ONLY a raw JSON object (no markdown, no ```json wrapper). Use this exact structure:
{{
  "analysis": {{
    "matchScore": <calculated_score_0_to_100>,
    "strengths": ["list", "of", "good", "points"],
    "matchKeywords": ["jd", "keywords", "present", "in", "resume"],
    "jdKeywords": ["important", "jd", "keywords"],
    "missingKeywords": ["list", "of", "missing", "keywords"]
  }},
  "suggestions": [
    {{
      "id": "unique-id-1",
      "type": "content" | "formatting" | "grammar",
      "originalText": "text from resume or empty string if new",
      "suggestedText": "rewritten line with STAR + metrics",
      "startIndex": number (or -1 if not applicable),
      "endIndex": number (or -1),
      "reason": "short explanation",
      "priority": "high" | "medium" | "low"
    }}
  ],
  "resumeData": {{
    "personalInfo": {{"name": "", "phone": "", "email": "", "linkedin": "", "portfolio": ""}},
    "education": [{{"school": "", "date": "", "degree": "", "gpa": ""}}],
    "skills": {{"languages": "", "frameworks": "", "tools": ""}},
    "experience": [
      {{
        "title": "", "company": "", "date": "", "location": "", "summary": "",
        "bulletPoints": [{{"original": "", "improved": "", "accepted": false}}]
      }}
    ],
    "projects": [
      {{
        "title": "", "link": "", "date": "", "summary": "", "location": "",
        "bulletPoints": [{{"original": "", "improved": "", "accepted": false}}]
      }}
    ]
  }}
}}"""


def build_prompt(
    resume_text: str,
    job_description: str,
    missing_keywords: Optional[List[str]] = None,
) -> str:
    """
    Build the analysis prompt.

    Resume and job description are prefix-truncated to RESUME_CHAR_LIMIT and
    JD_CHAR_LIMIT characters.

    Args:
        resume_text: Extracted resume text
        job_description: Job description text
        missing_keywords: Keywords the keyword engine found missing (None or [] -> "None")

    Returns:
        Prompt string for the LLM
    """
    return _ANALYSIS_PROMPT_TEMPLATE.format(
        missing_keywords=", ".join(missing_keywords) if missing_keywords else "None",
        resume_text=resume_text[:RESUME_CHAR_LIMIT],
        job_description=job_description[:JD_CHAR_LIMIT],
    )
