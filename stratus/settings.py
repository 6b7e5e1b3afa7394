"""
Environment-driven settings.
"""

import logging
import os
from pathlib import Path
from typing import Optional

DEFAULT_SSM_PREFIX = "/stratus"
WORKSPACE_DIR_NAME = "stratus"


def get_workspace_override() -> Optional[Path]:
    """
    Get an explicit workspace root, if one is configured.

    Returns:
        Path from STRATUS_WORKSPACE, or None to search upwards from the cwd
    """
    root = os.environ.get("STRATUS_WORKSPACE")
    if not root:
        return None
    return Path(root).resolve()


def get_ssm_prefix() -> str:
    """Get the SSM parameter path prefix under which applications are stored."""
    prefix = os.environ.get("STRATUS_SSM_PREFIX", DEFAULT_SSM_PREFIX)
    return "/" + prefix.strip("/")


def get_default_region() -> Optional[str]:
    return os.environ.get("AWS_REGION") or os.environ.get("AWS_DEFAULT_REGION")


def get_log_level(verbose: bool = False) -> int:
    """
    Resolve the log level for the CLI.

    Args:
        verbose: True when --verbose was passed

    Returns:
        A logging level constant
    """
    if verbose:
        return logging.DEBUG
    name = os.environ.get("STRATUS_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(name)
    return level if isinstance(level, int) else logging.INFO
