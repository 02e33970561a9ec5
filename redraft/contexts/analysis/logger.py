"""
Analysis context logger.

Provides logging interface for analysis context with automatic [analysis] prefix.
All analysis modules should import from this module, not from utils.logger directly.
"""

import os
from pathlib import Path

from dotenv import load_dotenv
from loguru import logger

from redraft.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[analysis]"


def setup_analysis_logger(log_dir: Path) -> Path:
    """
    Setup logger for analysis context.

    Args:
        log_dir: Directory for this analysis session

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="analysis",
        log_dir=log_dir,
        extra_provenance={"Model": os.getenv("GEMINI_MODEL", "gemini-2.0-flash")},
    )


def _log_info(message: str) -> None:
    """Log info message with [analysis] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [analysis] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [analysis] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [analysis] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
