"""Tests for layoutguard.rules — path model and per-path rule evaluation."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pytest

from layoutguard.rules import (
    ALLOWED_EXTENSIONS,
    CandidatePath,
    CategoryRule,
    ContentUnitRule,
    Violation,
    build_rules,
    evaluate_path,
    extension_of,
    has_allowed_entry,
)

if TYPE_CHECKING:
    from collections.abc import Callable


def _lister(tree: dict[str, list[str]]) -> Callable[[str], list[str]]:
    def list_dir(rel_path: str) -> list[str]:
        if rel_path not in tree:
            raise FileNotFoundError(rel_path)
        return tree[rel_path]

    return list_dir


def _no_listing(rel_path: str) -> list[str]:
    msg = f"unexpected listing of {rel_path}"
    raise AssertionError(msg)


RULES = build_rules()


# ---------------------------------------------------------------------------
# CandidatePath
# ---------------------------------------------------------------------------


class TestCandidatePath:
    def test_segments(self) -> None:
        assert CandidatePath("learn/topic/a.md").segments == ("learn", "topic", "a.md")

    def test_extension(self) -> None:
        assert CandidatePath("learn/topic/a.md").extension == ".md"

    def test_extension_uses_last_dot(self) -> None:
        assert CandidatePath("learn/topic/a.tar.gz").extension == ".gz"

    def test_no_extension(self) -> None:
        assert CandidatePath("learn/Makefile").extension == ""

    def test_dot_in_directory_only(self) -> None:
        assert CandidatePath("learn/v1.2/README").extension == ""

    @pytest.mark.parametrize("path", ["README.md", ".gitignore", ".github/workflows/ci.yml"])
    def test_exempt(self, path: str) -> None:
        assert CandidatePath(path).is_exempt

    def test_not_exempt(self) -> None:
        assert not CandidatePath("learn/a.md").is_exempt


class TestHelpers:
    def test_extension_is_case_sensitive(self) -> None:
        assert extension_of("IMAGE.PNG") == ".PNG"
        assert ".PNG" not in ALLOWED_EXTENSIONS

    def test_has_allowed_entry(self) -> None:
        assert has_allowed_entry(["notes.txt", "logo.svg"], ALLOWED_EXTENSIONS)
        assert not has_allowed_entry(["notes.txt", "LOGO.SVG"], ALLOWED_EXTENSIONS)
        assert not has_allowed_entry([], ALLOWED_EXTENSIONS)

    def test_build_rules_order(self) -> None:
        assert RULES == [
            ContentUnitRule(root=("build", "blueprints")),
            ContentUnitRule(root=("discover", "patterns")),
            CategoryRule(name="discover"),
            CategoryRule(name="learn"),
        ]

    def test_violation_str(self) -> None:
        v = Violation(
            file_path="learn/a/b.txt",
            rule_name="category",
            category="learn",
            message="Only .md and image files allowed in learn",
        )
        assert str(v) == "learn/a/b.txt: Only .md and image files allowed in learn"


# ---------------------------------------------------------------------------
# Skipped paths
# ---------------------------------------------------------------------------


class TestSkippedPaths:
    @pytest.mark.parametrize(
        "path",
        [
            "README.md",
            "package.json",
            ".husky/pre-commit",
            ".github/workflows/validate.yml",
            ".layoutguard.yml",
        ],
    )
    def test_never_checked(self, path: str) -> None:
        assert evaluate_path(path, RULES, _no_listing) is None

    def test_unknown_top_level_directory(self) -> None:
        assert evaluate_path("scripts/validate.py", RULES, _no_listing) is None


# ---------------------------------------------------------------------------
# Content units (build/blueprints, discover/patterns)
# ---------------------------------------------------------------------------


class TestContentUnitRule:
    def test_valid_blueprint(self) -> None:
        lister = _lister({"build/blueprints/foo": ["foo.md", "arch.png"]})
        assert evaluate_path("build/blueprints/foo/foo.md", RULES, lister) is None

    def test_images_only_directory_is_valid(self) -> None:
        lister = _lister({"build/blueprints/foo": ["arch.jpeg"]})
        assert evaluate_path("build/blueprints/foo/arch.jpeg", RULES, lister) is None

    def test_file_directly_in_root(self) -> None:
        v = evaluate_path("build/blueprints/foo", RULES, _no_listing)
        assert v is not None
        assert v.message == "Files in build/blueprints must be in a subdirectory"
        assert v.category == "build/blueprints"
        assert v.rule_name == "content-unit"

    def test_root_itself(self) -> None:
        v = evaluate_path("build/blueprints", RULES, _no_listing)
        assert v is not None
        assert "must be in a subdirectory" in v.message

    def test_directory_without_valid_files(self) -> None:
        lister = _lister({"discover/patterns/x": ["y.txt", "data.json"]})
        v = evaluate_path("discover/patterns/x/y.txt", RULES, lister)
        assert v is not None
        assert v.message == "Directory discover/patterns/x must contain .md and/or image files"

    def test_missing_directory_is_violation(self) -> None:
        v = evaluate_path("discover/patterns/x/y.md", RULES, _lister({}))
        assert v is not None
        assert "must contain .md and/or image files" in v.message

    def test_permission_error_is_violation(self) -> None:
        def denied(rel_path: str) -> list[str]:
            raise PermissionError(rel_path)

        v = evaluate_path("build/blueprints/foo/a.md", RULES, denied)
        assert v is not None
        assert "must contain .md and/or image files" in v.message

    def test_deeper_files_use_unit_directory(self) -> None:
        seen: list[str] = []

        def list_dir(rel_path: str) -> list[str]:
            seen.append(rel_path)
            return ["foo.md"]

        assert evaluate_path("build/blueprints/foo/img/a.png", RULES, list_dir) is None
        assert seen == ["build/blueprints/foo"]

    def test_patterns_win_over_discover_category(self) -> None:
        # Four segments would be "nested" under the plain discover rule.
        lister = _lister({"discover/patterns/rag": ["pattern.md"]})
        assert evaluate_path("discover/patterns/rag/pattern.md", RULES, lister) is None

    def test_blueprints_requires_exact_prefix(self) -> None:
        assert evaluate_path("build/other/foo.txt", RULES, _no_listing) is None


# ---------------------------------------------------------------------------
# Categories (discover, learn)
# ---------------------------------------------------------------------------


class TestCategoryRule:
    def test_services_frameworks_file(self) -> None:
        assert evaluate_path("discover/services-frameworks/foo.md", RULES, _no_listing) is None

    def test_file_directly_in_category(self) -> None:
        assert evaluate_path("learn/overview.md", RULES, _no_listing) is None

    def test_nested(self) -> None:
        v = evaluate_path("discover/services-frameworks/sub/foo.md", RULES, _no_listing)
        assert v is not None
        assert v.message == "Files in discover should be directly in subdirectories, not nested"
        assert v.rule_name == "category"

    def test_disallowed_extension(self) -> None:
        v = evaluate_path("learn/topic/notes.txt", RULES, _no_listing)
        assert v is not None
        assert v.message == "Only .md and image files allowed in learn"
        assert v.category == "learn"

    def test_nesting_reported_before_extension(self) -> None:
        v = evaluate_path("learn/a/b/c.txt", RULES, _no_listing)
        assert v is not None
        assert "not nested" in v.message

    def test_uppercase_extension_rejected(self) -> None:
        v = evaluate_path("learn/topic/DIAGRAM.PNG", RULES, _no_listing)
        assert v is not None
        assert "Only .md and image files" in v.message

    @pytest.mark.parametrize("ext", sorted(ALLOWED_EXTENSIONS))
    def test_allowed_extensions(self, ext: str) -> None:
        assert evaluate_path(f"learn/topic/file{ext}", RULES, _no_listing) is None

    def test_custom_allowed_set(self) -> None:
        v = evaluate_path(
            "learn/topic/clip.gif",
            RULES,
            _no_listing,
            allowed=frozenset({".md", ".gif"}),
        )
        assert v is None
