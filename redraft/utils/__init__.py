"""
Shared utilities for redraft.

Common functionality used across contexts:
- Logger setup
- LaTeX escaping
- LLM provider access and retry handling
"""

from redraft.utils.latex_escape import escape_latex
from redraft.utils.logger import setup_logger

__all__ = ["escape_latex", "setup_logger"]
