"""
Rendering Context

Responsibilities:
- Compiles LaTeX to PDF in a throwaway workspace
- Enforces the compile timeout and reaps the compiler process
- Reports compiler output and failures with diagnostic information

Owns: LaTeX compilation, PDF generation
Never: Modifies template content
"""

from redraft.contexts.rendering.compiler import (
    CompilationResult,
    check_compiler_installed,
    compile_latex,
    compile_resume,
)
from redraft.contexts.rendering.exceptions import (
    CompilationError,
    CompilationFailure,
    CompilationTimeout,
    CompilerNotFound,
    MissingOutputArtifact,
)

__all__ = [
    "compile_latex",
    "compile_resume",
    "check_compiler_installed",
    "CompilationResult",
    "CompilationError",
    "CompilationFailure",
    "CompilationTimeout",
    "CompilerNotFound",
    "MissingOutputArtifact",
]
