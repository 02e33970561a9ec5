"""
Integration tests for rendering context - run real compiler processes.

The Python interpreter stands in for the LaTeX compiler so exit codes,
timeouts and missing output can be exercised without a TeX installation.
"""

import os
import shutil
import sys
import threading
import time
from pathlib import Path

import pytest

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

TECTONIC_AVAILABLE = shutil.which("tectonic") is not None
skip_if_no_tectonic = pytest.mark.skipif(
    not TECTONIC_AVAILABLE,
    reason="tectonic not installed - see https://tectonic-typesetting.github.io",
)

MINIMAL_LATEX = "\\documentclass{article}\n\\begin{document}\nHello\n\\end{document}\n"


def _python(script: str) -> list:
    """Compiler command that runs script; the .tex file name arrives as sys.argv[1]."""
    return [sys.executable, "-c", script]


# Copies the source into resume.pdf so tests can see what was compiled
FAKE_COMPILER = _python(
    "import sys, pathlib\n"
    "src = pathlib.Path(sys.argv[1]).read_bytes()\n"
    "pathlib.Path('resume.pdf').write_bytes(b'%PDF-fake\\n' + src)\n"
    "print('Writing resume.pdf')\n"
    "print('warning: overfull hbox', file=sys.stderr)\n"
)


@pytest.mark.integration
def test_compile_success(tmp_path):
    result = compile_latex(MINIMAL_LATEX, command=FAKE_COMPILER, workspace_root=tmp_path)

    assert isinstance(result, CompilationResult)
    assert result.pdf_bytes.startswith(b"%PDF-fake\n")
    assert MINIMAL_LATEX.encode() in result.pdf_bytes
    assert result.command == FAKE_COMPILER
    assert result.elapsed_s >= 0


@pytest.mark.integration
def test_stdout_and_stderr_are_merged(tmp_path):
    result = compile_latex(MINIMAL_LATEX, command=FAKE_COMPILER, workspace_root=tmp_path)

    assert "Writing resume.pdf" in result.output_lines
    assert "warning: overfull hbox" in result.output_lines


@pytest.mark.integration
def test_non_zero_exit_raises_failure(tmp_path):
    command = _python("import sys; print('! Undefined control sequence.'); sys.exit(3)")

    with pytest.raises(CompilationFailure) as exc_info:
        compile_latex(MINIMAL_LATEX, command=command, workspace_root=tmp_path)

    assert exc_info.value.exit_code == 3
    assert "! Undefined control sequence." in exc_info.value.output_lines


@pytest.mark.integration
def test_failure_even_if_pdf_was_written(tmp_path):
    command = _python(
        "import sys, pathlib; pathlib.Path('resume.pdf').write_bytes(b'%PDF'); sys.exit(1)"
    )

    with pytest.raises(CompilationFailure):
        compile_latex(MINIMAL_LATEX, command=command, workspace_root=tmp_path)


@pytest.mark.integration
def test_zero_exit_without_pdf_raises_missing_artifact(tmp_path):
    command = _python("print('nothing to see here')")

    with pytest.raises(MissingOutputArtifact) as exc_info:
        compile_latex(MINIMAL_LATEX, command=command, workspace_root=tmp_path)

    assert exc_info.value.expected == "resume.pdf"
    assert exc_info.value.output_lines == ["nothing to see here"]


@pytest.mark.integration
def test_timeout_kills_and_reaps_process(tmp_path):
    command = _python("import time; print('starting', flush=True); time.sleep(30)")

    with pytest.raises(CompilationTimeout) as exc_info:
        compile_latex(MINIMAL_LATEX, command=command, timeout=0.5, workspace_root=tmp_path)

    error = exc_info.value
    assert error.timeout == 0.5
    assert "starting" in error.output_lines
    # The process is gone and reaped
    with pytest.raises(ProcessLookupError):
        os.kill(error.pid, 0)



def _is_running(pid: int) -> bool:
    """True while pid exists and is not a zombie awaiting its reaper."""
    try:
        os.kill(pid, 0)
    except ProcessLookupError:
        return False
    stat = Path(f"/proc/{pid}/stat")
    if not Path("/proc/self").exists():
        return True
    try:
        return stat.read_text().rsplit(")", 1)[1].split()[0] != "Z"
    except FileNotFoundError:
        return False


# Starts a child that inherits the output pipe, then hangs alongside it
SPAWNING_COMPILER = _python(
    "import subprocess, sys, time\n"
    "child = subprocess.Popen([sys.executable, '-c', 'import time; time.sleep(30)'])\n"
    "print('child', child.pid, flush=True)\n"
    "time.sleep(30)\n"
)


@pytest.mark.integration
@pytest.mark.skipif(not hasattr(os, "killpg"), reason="process groups are POSIX only")
def test_timeout_kills_processes_started_by_the_compiler(tmp_path):
    start = time.monotonic()
    with pytest.raises(CompilationTimeout) as exc_info:
        compile_latex(MINIMAL_LATEX, command=SPAWNING_COMPILER, timeout=0.5, workspace_root=tmp_path)
    elapsed = time.monotonic() - start

    # Bounded by the timeout, not by the child's sleep
    assert elapsed < 10

    child_line = next(line for line in exc_info.value.output_lines if line.startswith("child "))
    child_pid = int(child_line.split()[1])
    deadline = time.monotonic() + 5
    while _is_running(child_pid) and time.monotonic() < deadline:
        time.sleep(0.05)
    assert not _is_running(child_pid)
    assert list(tmp_path.iterdir()) == []


@pytest.mark.integration
def test_missing_executable_raises_compiler_not_found(tmp_path):
    with pytest.raises(CompilerNotFound) as exc_info:
        compile_latex(MINIMAL_LATEX, command=["redraft-no-such-compiler"], workspace_root=tmp_path)

    assert exc_info.value.executable == "redraft-no-such-compiler"
    assert isinstance(exc_info.value, CompilationFailure)


@pytest.mark.integration
@pytest.mark.parametrize(
    "command",
    [
        FAKE_COMPILER,
        _python("import sys; sys.exit(1)"),
        _python("pass"),
        _python("import time; time.sleep(30)"),
    ],
)
def test_workspace_removed_on_every_exit_path(tmp_path, command):
    try:
        compile_latex(MINIMAL_LATEX, command=command, timeout=0.5, workspace_root=tmp_path)
    except CompilationError:
        pass

    assert list(tmp_path.iterdir()) == []


@pytest.mark.integration
def test_concurrent_compiles_use_separate_workspaces(tmp_path):
    results = {}

    def worker(n):
        latex = MINIMAL_LATEX.replace("Hello", f"Hello {n}")
        results[n] = compile_latex(latex, command=FAKE_COMPILER, workspace_root=tmp_path)

    threads = [threading.Thread(target=worker, args=(n,)) for n in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    for n in range(4):
        assert f"Hello {n}".encode() in results[n].pdf_bytes
    assert list(tmp_path.iterdir()) == []


@pytest.mark.integration
def test_compile_resume_renders_document(tmp_path, sample_document):
    result = compile_resume(sample_document, command=FAKE_COMPILER, workspace_root=tmp_path)

    assert b"\\documentclass" in result.pdf_bytes
    assert b"Philip J. Fry" in result.pdf_bytes


@pytest.mark.integration
def test_check_compiler_installed():
    assert check_compiler_installed([sys.executable])
    assert not check_compiler_installed(["redraft-no-such-compiler"])


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_tectonic
def test_tectonic_compiles_sample_resume(tmp_path, sample_document):
    result = compile_resume(sample_document, command=["tectonic"], timeout=300, workspace_root=tmp_path)

    assert result.pdf_bytes.startswith(b"%PDF")


@pytest.mark.integration
@pytest.mark.latex
@skip_if_no_tectonic
def test_tectonic_reports_latex_errors(tmp_path):
    broken = "\\documentclass{article}\n\\begin{document}\n\\undefinedmacro\n\\end{document}\n"

    with pytest.raises(CompilationFailure) as exc_info:
        compile_latex(broken, command=["tectonic"], timeout=300, workspace_root=tmp_path)

    assert exc_info.value.output_lines
