"""
LaTeX Compilation Module

Handles compilation of LaTeX source to PDF with an external compiler
(tectonic by default).

Each call compiles in its own temporary workspace, which is removed on every
exit path. The compiler is killed and reaped if it runs past the timeout.
"""

import os
import shlex
import shutil
import signal
import subprocess
import tempfile
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Sequence

from dotenv import load_dotenv

from redraft.contexts.rendering.exceptions import (
    CompilationError,
    CompilationFailure,
    CompilationTimeout,
    CompilerNotFound,
    MissingOutputArtifact,
)
from redraft.contexts.rendering.logger import (
    _log_debug,
    log_compilation_failure,
    log_compilation_result,
    log_compilation_start,
    log_compiler_output,
)
from redraft.contexts.templating.latex_generator import generate_latex
from redraft.contexts.templating.resume_data_structure import ResumeDocument

load_dotenv()

LATEX_COMPILER = os.getenv("LATEX_COMPILER", "tectonic")
COMPILE_TIMEOUT_S = float(os.getenv("COMPILE_TIMEOUT_S", "60"))

# Upper bound on draining output after the compiler has been killed
REAP_TIMEOUT_S = 5.0

TEX_FILENAME = "resume.tex"
PDF_FILENAME = "resume.pdf"


@dataclass
class CompilationResult:
    """
    Result of a successful LaTeX compilation.

    Attributes:
        pdf_bytes: Contents of the generated PDF
        output_lines: Combined stdout/stderr from the compiler
        elapsed_s: Wall-clock compile time in seconds
        command: Command that was run (without the input file name)
    """

    pdf_bytes: bytes
    output_lines: List[str] = field(default_factory=list)
    elapsed_s: float = 0.0
    command: List[str] = field(default_factory=list)


def _resolve_command(command: Optional[Sequence[str]]) -> List[str]:
    if command is None:
        return shlex.split(LATEX_COMPILER)
    if isinstance(command, str):
        return shlex.split(command)
    return list(command)


def check_compiler_installed(command: Optional[Sequence[str]] = None) -> bool:
    """
    Check whether the compiler executable is available on PATH.

    Args:
        command: Compiler command (default: LATEX_COMPILER env var)

    Returns:
        True if the executable can be found
    """
    resolved = _resolve_command(command)
    return bool(resolved) and shutil.which(resolved[0]) is not None


def _decode_output(output: Optional[bytes]) -> List[str]:
    if not output:
        return []
    return output.decode("utf-8", errors="replace").splitlines()


def _kill_process_tree(process: subprocess.Popen) -> None:
    """Kill the compiler and every process it started in its session."""
    if hasattr(os, "killpg"):
        try:
            os.killpg(process.pid, signal.SIGKILL)
        except ProcessLookupError:
            pass
    else:
        process.kill()


def _reap(process: subprocess.Popen) -> Optional[bytes]:
    """
    Collect remaining output from a killed compiler and wait for it to exit.

    Output draining is bounded by REAP_TIMEOUT_S so a descendant that escaped
    the process group and still holds the pipe cannot block the caller.
    """
    try:
        output, _ = process.communicate(timeout=REAP_TIMEOUT_S)
    except subprocess.TimeoutExpired as e:
        _log_debug(f"Compiler output pipe still open after kill (pid {process.pid})")
        output = e.output
        if process.stdout is not None:
            process.stdout.close()
    process.wait()
    return output


def _run_compiler(cmd: List[str], workspace: Path, timeout: float) -> List[str]:
    """
    Run the compiler in workspace and return its output lines.

    The compiler runs as the leader of a new session so that a timeout kills
    any processes it spawned (latexmk, wrapper scripts) along with it.

    Raises:
        CompilerNotFound: If the executable does not exist
        CompilationTimeout: If the process outlives timeout (it is killed first)
        CompilationFailure: If the process exits non-zero
    """
    try:
        process = subprocess.Popen(
            cmd,
            cwd=workspace,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            start_new_session=True,
        )
    except FileNotFoundError as e:
        raise CompilerNotFound(cmd[0]) from e

    try:
        output, _ = process.communicate(timeout=timeout)
    except subprocess.TimeoutExpired:
        _kill_process_tree(process)
        output = _reap(process)
        output_lines = _decode_output(output)
        log_compiler_output(output_lines)
        raise CompilationTimeout(process.pid, timeout, output_lines)

    output_lines = _decode_output(output)
    log_compiler_output(output_lines)

    if process.returncode != 0:
        raise CompilationFailure(
            f"Compiler exited with status {process.returncode}",
            exit_code=process.returncode,
            output_lines=output_lines,
        )
    return output_lines


def compile_latex(
    latex: str,
    command: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
    workspace_root: Optional[Path] = None,
) -> CompilationResult:
    """
    Compile LaTeX source to PDF.

    Writes the source to resume.tex in a fresh temporary workspace, runs
    ``[*command, "resume.tex"]`` there and reads back resume.pdf.

    Args:
        latex: Complete LaTeX document
        command: Compiler command (default: LATEX_COMPILER env var)
        timeout: Seconds before the compiler is killed (default: COMPILE_TIMEOUT_S)
        workspace_root: Directory to create the workspace in (default: system temp)

    Returns:
        CompilationResult with the PDF bytes and compiler output

    Raises:
        CompilerNotFound: If the compiler executable is missing
        CompilationTimeout: If compilation ran past the timeout
        CompilationFailure: If the compiler exited non-zero
        MissingOutputArtifact: If the compiler exited zero without writing the PDF
    """
    cmd = _resolve_command(command)
    if not cmd:
        raise CompilerNotFound("")
    if timeout is None:
        timeout = COMPILE_TIMEOUT_S

    start_time = time.time()

    with tempfile.TemporaryDirectory(prefix="redraft_", dir=workspace_root) as tmp:
        workspace = Path(tmp)
        (workspace / TEX_FILENAME).write_text(latex, encoding="utf-8")
        log_compilation_start(cmd, workspace, timeout)

        try:
            output_lines = _run_compiler([*cmd, TEX_FILENAME], workspace, timeout)

            pdf_path = workspace / PDF_FILENAME
            if not pdf_path.exists():
                raise MissingOutputArtifact(PDF_FILENAME, output_lines)
            pdf_bytes = pdf_path.read_bytes()
        except CompilationError as e:
            log_compilation_failure(e, time.time() - start_time)
            raise

    _log_debug(f"Removed workspace {workspace}")

    elapsed_s = time.time() - start_time
    result = CompilationResult(
        pdf_bytes=pdf_bytes,
        output_lines=output_lines,
        elapsed_s=elapsed_s,
        command=cmd,
    )
    log_compilation_result(result, elapsed_s)
    return result


def compile_resume(
    document: ResumeDocument,
    command: Optional[Sequence[str]] = None,
    timeout: Optional[float] = None,
    workspace_root: Optional[Path] = None,
) -> CompilationResult:
    """
    Render a ResumeDocument to LaTeX and compile it.

    Args:
        document: Structured resume
        command: Compiler command (default: LATEX_COMPILER env var)
        timeout: Seconds before the compiler is killed
        workspace_root: Directory to create the workspace in

    Returns:
        CompilationResult with the PDF bytes
    """
    latex = generate_latex(document)
    return compile_latex(latex, command=command, timeout=timeout, workspace_root=workspace_root)
