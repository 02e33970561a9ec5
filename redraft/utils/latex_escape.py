"""
LaTeX escaping for free-text resume fields.

The substitution table is applied in a single left-to-right pass, so the
backslashes it inserts are never matched again.
"""

from typing import Optional

# Ordered substitutions for LaTeX-reserved characters
LATEX_ESCAPES = (
    ("&", r"\&"),
    ("%", r"\%"),
    ("$", r"\$"),
    ("#", r"\#"),
    ("_", r"\_"),
    ("{", r"\{"),
    ("}", r"\}"),
    ("~", r"\textasciitilde "),
    ("^", r"\textasciicircum "),
)

_ESCAPE_TABLE = str.maketrans(dict(LATEX_ESCAPES))


def escape_latex(text: Optional[str]) -> str:
    """
    Escape LaTeX-reserved characters in plain text.

    Args:
        text: Plain text (None is treated as empty)

    Returns:
        Text safe to place inside a LaTeX argument

    Example:
        >>> escape_latex("C# & Go_Lang")
        'C\\\\# \\\\& Go\\\\_Lang'
    """
    if text is None:
        return ""
    return str(text).translate(_ESCAPE_TABLE)
