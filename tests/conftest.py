"""Shared test fixtures for Layoutguard."""

from __future__ import annotations

import subprocess
from typing import TYPE_CHECKING

import pytest

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path


@pytest.fixture()
def content_repo(tmp_path: Path) -> Path:
    """Create a content repository that follows the expected layout."""
    blueprint = tmp_path / "build" / "blueprints" / "chat-app"
    blueprint.mkdir(parents=True)
    (blueprint / "chat-app.md").write_text("# Chat app\n")
    (blueprint / "diagram.png").write_bytes(b"\x89PNG")

    pattern = tmp_path / "discover" / "patterns" / "rag"
    pattern.mkdir(parents=True)
    (pattern / "pattern.md").write_text("# RAG\n")

    (tmp_path / "discover" / "services-frameworks").mkdir(parents=True)
    (tmp_path / "discover" / "services-frameworks" / "bedrock.md").write_text("# Bedrock\n")

    (tmp_path / "learn" / "basics").mkdir(parents=True)
    (tmp_path / "learn" / "basics" / "intro.md").write_text("# Intro\n")
    return tmp_path


@pytest.fixture()
def fake_lister() -> Callable[[dict[str, list[str]]], Callable[[str], list[str]]]:
    """Build an in-memory directory lister; unknown directories raise FileNotFoundError."""

    def factory(tree: dict[str, list[str]]) -> Callable[[str], list[str]]:
        def list_dir(rel_path: str) -> list[str]:
            if rel_path not in tree:
                raise FileNotFoundError(rel_path)
            return list(tree[rel_path])

        return list_dir

    return factory


def _git(repo: Path, *args: str) -> None:
    subprocess.run(  # noqa: S603
        ["git", *args],  # noqa: S607
        cwd=str(repo),
        capture_output=True,
        check=True,
    )


@pytest.fixture()
def git_repo(tmp_path: Path) -> Path:
    """Create a real temporary git repository."""
    repo = tmp_path / "repo"
    repo.mkdir()
    _git(repo, "init")
    _git(repo, "config", "user.email", "test@example.com")
    _git(repo, "config", "user.name", "Test User")
    return repo
