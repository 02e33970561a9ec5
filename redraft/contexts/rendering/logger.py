"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path
from typing import Sequence

from dotenv import load_dotenv
from loguru import logger

from redraft.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path) -> Path:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"LaTeX compiler": os.getenv("LATEX_COMPILER", "tectonic")},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_compilation_start(command: Sequence[str], working_dir: Path, timeout: float) -> None:
    """Log start of compilation with context."""
    _log_info(f"Starting compilation: {' '.join(command)}")
    _log_debug(f"  Workspace: {working_dir}")
    _log_debug(f"  Timeout: {timeout:g}s")


def log_compiler_output(output_lines: Sequence[str]) -> None:
    """
    Log raw compiler output at debug level.

    Uses opt(raw=True) so multi-line output keeps its formatting instead of
    getting a timestamp on every line.
    """
    if not output_lines:
        return
    body = "\n".join(output_lines)
    logger.opt(raw=True).debug(f"\n{'=' * 80}\nCOMPILER OUTPUT:\n{'=' * 80}\n{body}\n")


def log_compilation_result(result, elapsed_time: float) -> None:  # CompilationResult
    """Log a successful compilation."""
    _log_success(f"Compilation succeeded: {len(result.pdf_bytes)} bytes ({elapsed_time:.2f}s)")


def log_compilation_failure(error: Exception, elapsed_time: float, error_limit: int = 5) -> None:
    """Log a failed compilation with the tail of the compiler output."""
    _log_error(f"Compilation failed ({elapsed_time:.2f}s): {error}")
    tail = getattr(error, "output_lines", [])[-error_limit:]
    for i, line in enumerate(tail, 1):
        _log_error(f"  Output {i}: {line}")
