"""Custom exceptions for rendering context."""

from typing import List, Optional, Sequence


class CompilationError(Exception):
    """
    Base class for LaTeX compilation failures.

    Attributes:
        message: Error description
        output_lines: Compiler output captured before the failure
    """

    def __init__(self, message: str, output_lines: Optional[Sequence[str]] = None):
        self.message = message
        self.output_lines: List[str] = list(output_lines or [])
        super().__init__(message)

    def tail(self, n: int = 20) -> List[str]:
        """Last n lines of compiler output, where errors usually are."""
        return self.output_lines[-n:]


class CompilationTimeout(CompilationError):
    """The compiler ran past its deadline and was killed."""

    def __init__(self, pid: int, timeout: float, output_lines: Optional[Sequence[str]] = None):
        self.pid = pid
        self.timeout = timeout
        super().__init__(
            f"Compiler (pid {pid}) did not finish within {timeout:g}s and was killed",
            output_lines,
        )


class CompilationFailure(CompilationError):
    """The compiler exited with a non-zero status."""

    def __init__(
        self,
        message: str,
        exit_code: Optional[int] = None,
        output_lines: Optional[Sequence[str]] = None,
    ):
        self.exit_code = exit_code
        super().__init__(message, output_lines)


class CompilerNotFound(CompilationFailure):
    """The compiler executable is not on PATH."""

    def __init__(self, executable: str):
        self.executable = executable
        super().__init__(f"LaTeX compiler not found: {executable}")


class MissingOutputArtifact(CompilationError):
    """The compiler exited cleanly but produced no PDF."""

    def __init__(self, expected: str, output_lines: Optional[Sequence[str]] = None):
        self.expected = expected
        super().__init__(f"Compiler exited successfully but {expected} was not produced", output_lines)
