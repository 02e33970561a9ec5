"""
Templating context logger.

Provides the [template]-prefixed logging helpers used by templating modules.
Logging sinks are configured by whichever entry point drives rendering.
"""

from loguru import logger

CONTEXT_PREFIX = "[template]"


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")
