"""Build version information and the version command output."""

from __future__ import annotations

import platform
import sys

# Set at build time.
VERSION = ""
GIT_BRANCH = ""
GIT_HASH = ""


def version_line(name: str, version: str, git_branch: str, git_hash: str) -> str:
    """Return the detailed version line printed by the version command."""
    if git_branch and git_hash:
        git_info = f"@{git_branch}-{git_hash}"
    elif git_hash:
        git_info = f"@{git_hash}"
    else:
        git_info = ""
    runtime = f"Python {platform.python_version()}"
    return (
        f"{name} v{version}{git_info} compiled with {runtime} "
        f"on {sys.platform}/{platform.machine()}"
    )