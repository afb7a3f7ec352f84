"""Git queries: staged files, repository root, and hooks directory."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Raised when a git query fails or *project_root* is not a repository."""


def _run_git(project_root: Path, *args: str) -> str:
    """Run ``git <args>`` in *project_root* and return its stdout."""
    try:
        result = subprocess.run(  # noqa: S603
            ["git", *args],  # noqa: S607
            cwd=str(project_root),
            capture_output=True,
            text=True,
            encoding="utf-8",
            errors="surrogateescape",
            timeout=30,
        )
    except (FileNotFoundError, subprocess.TimeoutExpired) as exc:
        logger.debug("git %s failed to run: %s", args[0], exc)
        msg = f"Could not run git in {project_root}: {exc}"
        raise GitError(msg) from exc

    if result.returncode != 0:
        logger.debug("git %s exited with %d: %s", args[0], result.returncode, result.stderr.strip())
        msg = result.stderr.strip() or f"git {args[0]} exited with code {result.returncode}"
        raise GitError(msg)

    return result.stdout


def parse_name_only(output: str) -> list[str]:
    """Parse ``git diff --name-only -z`` output into paths, dropping empty entries.

    Entries are NUL-terminated and unquoted, so paths keep non-ASCII
    characters and surrounding spaces exactly as staged.
    """
    return [entry for entry in output.split("\0") if entry]


def staged_files(project_root: Path) -> list[str]:
    """Return the paths staged in the index, relative to the repository root.

    Raises
    ------
    GitError
        When git is unavailable, times out, or *project_root* is not a repository.
    """
    return parse_name_only(_run_git(project_root, "diff", "--cached", "--name-only", "-z"))


def repository_root(project_root: Path) -> Path:
    """Return the top-level directory of the work tree containing *project_root*."""
    return Path(_run_git(project_root, "rev-parse", "--show-toplevel").rstrip("\n"))


def hooks_dir(project_root: Path) -> Path:
    """Return the hooks directory git uses for *project_root*.

    Honors ``core.hooksPath`` and resolves linked worktrees and submodules,
    where ``.git`` is a file rather than a directory.
    """
    root = repository_root(project_root)
    hooks = Path(_run_git(root, "rev-parse", "--git-path", "hooks").rstrip("\n"))
    if not hooks.is_absolute():
        hooks = root / hooks
    return hooks
