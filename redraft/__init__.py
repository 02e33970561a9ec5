"""
redraft - Resume rewriting against a job description

Scores a resume against a job description, asks an LLM for a structured
analysis and an editable resume, and regenerates the resume as a typeset PDF.

Architecture:
- Scoring Context: Deterministic keyword extraction and overlap scoring
- Analysis Context: Prompt construction, Gemini call, response parsing
- Templating Context: Structured resume data and LaTeX generation
- Rendering Context: PDF compilation in an isolated workspace
"""

__version__ = "0.1.0"
