"""Layout rule engine: candidate paths, rule definitions, and per-path evaluation."""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from pathlib import PurePosixPath

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({".md", ".svg", ".png", ".jpg", ".jpeg"})
DEFAULT_CONTENT_UNITS: tuple[str, ...] = ("build/blueprints", "discover/patterns")
DEFAULT_CATEGORIES: tuple[str, ...] = ("discover", "learn")

# Returns the entry names of a directory relative to the project root.
# Raises OSError when the directory is missing or unreadable.
DirectoryLister = Callable[[str], Iterable[str]]

# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class CandidatePath:
    """A file path relative to the repository root."""

    path: str

    @property
    def segments(self) -> tuple[str, ...]:
        return tuple(self.path.split("/"))

    @property
    def extension(self) -> str:
        """Suffix of the final segment including the dot, or ``""``."""
        return extension_of(self.segments[-1])

    @property
    def is_exempt(self) -> bool:
        """Root-level files and dot-prefixed paths are never checked."""
        return len(self.segments) < 2 or self.path.startswith(".")


@dataclass(frozen=True)
class ContentUnitRule:
    """Files must live in a named unit directory holding markdown or images.

    For root ``build/blueprints`` the accepted shape is
    ``build/blueprints/<name>/<file>`` and ``build/blueprints/<name>`` must
    contain at least one entry with an allowed extension.
    """

    root: tuple[str, ...]

    @property
    def name(self) -> str:
        return "/".join(self.root)

    def applies_to(self, candidate: CandidatePath) -> bool:
        return candidate.segments[: len(self.root)] == self.root


@dataclass(frozen=True)
class CategoryRule:
    """Files sit at most one directory below the category, with allowed extensions."""

    name: str
    max_depth: int = 2  # segments below the category directory

    def applies_to(self, candidate: CandidatePath) -> bool:
        return candidate.segments[0] == self.name


Rule = ContentUnitRule | CategoryRule


@dataclass(frozen=True)
class Violation:
    """A single layout violation."""

    file_path: str
    rule_name: str  # "content-unit" | "category"
    category: str  # rule root, e.g. "build/blueprints" or "learn"
    message: str

    def __str__(self) -> str:
        return f"{self.file_path}: {self.message}"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def extension_of(filename: str) -> str:
    """Return the extension of *filename* (``"notes.MD"`` -> ``".MD"``)."""
    return PurePosixPath(filename).suffix


def has_allowed_entry(entries: Iterable[str], allowed: frozenset[str]) -> bool:
    return any(extension_of(entry) in allowed for entry in entries)


def build_rules(
    content_units: Iterable[str] = DEFAULT_CONTENT_UNITS,
    categories: Iterable[str] = DEFAULT_CATEGORIES,
) -> list[Rule]:
    """Build the ordered rule list.

    Content-unit rules come first so that ``discover/patterns`` wins over the
    broader ``discover`` category.
    """
    rules: list[Rule] = [ContentUnitRule(root=tuple(unit.split("/"))) for unit in content_units]
    rules.extend(CategoryRule(name=name) for name in categories)
    return rules


# ---------------------------------------------------------------------------
# Evaluation
# ---------------------------------------------------------------------------


def _evaluate_content_unit(
    rule: ContentUnitRule,
    candidate: CandidatePath,
    list_dir: DirectoryLister,
    allowed: frozenset[str],
) -> Violation | None:
    segments = candidate.segments
    if len(segments) < len(rule.root) + 2:
        return Violation(
            file_path=candidate.path,
            rule_name="content-unit",
            category=rule.name,
            message=f"Files in {rule.name} must be in a subdirectory",
        )

    unit_dir = "/".join(segments[: len(rule.root) + 1])
    try:
        entries = list(list_dir(unit_dir))
    except OSError:
        entries = []
    if has_allowed_entry(entries, allowed):
        return None
    return Violation(
        file_path=candidate.path,
        rule_name="content-unit",
        category=rule.name,
        message=f"Directory {unit_dir} must contain .md and/or image files",
    )


def _evaluate_category(
    rule: CategoryRule,
    candidate: CandidatePath,
    allowed: frozenset[str],
) -> Violation | None:
    if len(candidate.segments) - 1 > rule.max_depth:
        return Violation(
            file_path=candidate.path,
            rule_name="category",
            category=rule.name,
            message=f"Files in {rule.name} should be directly in subdirectories, not nested",
        )
    if candidate.extension not in allowed:
        return Violation(
            file_path=candidate.path,
            rule_name="category",
            category=rule.name,
            message=f"Only .md and image files allowed in {rule.name}",
        )
    return None


def evaluate_path(
    path: str,
    rules: Iterable[Rule],
    list_dir: DirectoryLister,
    *,
    allowed: frozenset[str] = ALLOWED_EXTENSIONS,
) -> Violation | None:
    """Evaluate a single path against *rules*; the first applicable rule decides.

    Returns ``None`` when the path is valid or no rule applies.
    """
    candidate = CandidatePath(path)
    if candidate.is_exempt:
        return None

    for rule in rules:
        if not rule.applies_to(candidate):
            continue
        if isinstance(rule, ContentUnitRule):
            return _evaluate_content_unit(rule, candidate, list_dir, allowed)
        return _evaluate_category(rule, candidate, allowed)

    return None
