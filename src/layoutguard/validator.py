"""Structure validator: evaluate candidate paths and format the results."""

from __future__ import annotations

import json
import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from layoutguard.config import LayoutConfig
from layoutguard.rules import Violation, evaluate_path

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

    from layoutguard.rules import DirectoryLister

logger = logging.getLogger(__name__)

EXPECTED_STRUCTURE = """\
├── build/blueprints/[name]/
│   ├── [name].md
│   └── [images]
├── discover/patterns/[name]/
│   ├── pattern.md
│   └── [images]
├── discover/services-frameworks/
│   └── [name].md
└── learn/[category]/
    └── [name].md"""


# ---------------------------------------------------------------------------
# Data classes
# ---------------------------------------------------------------------------


@dataclass
class ValidationResult:
    """Result of a validation run."""

    violations: list[Violation] = field(default_factory=list)
    paths_checked: int = 0
    elapsed_ms: float = 0.0

    @property
    def passed(self) -> bool:
        return not self.violations

    @property
    def messages(self) -> list[str]:
        return [str(v) for v in self.violations]


# ---------------------------------------------------------------------------
# Directory listing
# ---------------------------------------------------------------------------


def filesystem_lister(project_root: Path) -> DirectoryLister:
    """Return a lister that reads entry names under *project_root*."""

    def list_dir(rel_path: str) -> list[str]:
        return [entry.name for entry in (project_root / rel_path).iterdir()]

    return list_dir


def _memoized(list_dir: DirectoryLister) -> DirectoryLister:
    """Cache listings (and listing failures) for the duration of one run."""
    cache: dict[str, list[str]] = {}
    failures: dict[str, tuple[int | None, str | None]] = {}

    def cached(rel_path: str) -> list[str]:
        if rel_path in failures:
            errno, strerror = failures[rel_path]
            raise OSError(errno, strerror, rel_path)
        if rel_path not in cache:
            try:
                cache[rel_path] = list(list_dir(rel_path))
            except OSError as exc:
                logger.debug("Cannot list %s: %s", rel_path, exc)
                failures[rel_path] = (exc.errno, exc.strerror)
                raise
        return cache[rel_path]

    return cached


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def validate(
    paths: Iterable[str],
    list_dir: DirectoryLister,
    *,
    config: LayoutConfig | None = None,
) -> ValidationResult:
    """Check every path against the layout rules.

    Parameters
    ----------
    paths:
        Candidate file paths relative to the repository root.  Empty entries
        are ignored; other whitespace is part of the path.
    list_dir:
        Directory lister used by the content-unit rules.  A lister that raises
        ``OSError`` is treated as an empty directory.
    config:
        Layout conventions; defaults to the built-in ones.

    Returns
    -------
    ValidationResult
        All violations, in the order of their paths.
    """
    start = time.monotonic()
    config = config or LayoutConfig()
    rules = config.rules()
    lister = _memoized(list_dir)

    violations: list[Violation] = []
    checked = 0
    for raw in paths:
        path = raw.rstrip("\r\n")
        if not path:
            continue
        checked += 1
        violation = evaluate_path(path, rules, lister, allowed=config.allowed_extensions)
        if violation is not None:
            violations.append(violation)

    elapsed = (time.monotonic() - start) * 1000
    logger.debug("Checked %d paths, %d violations", checked, len(violations))
    return ValidationResult(violations=violations, paths_checked=checked, elapsed_ms=elapsed)


# ---------------------------------------------------------------------------
# Formatters
# ---------------------------------------------------------------------------


def format_rich(result: ValidationResult) -> str:
    """Format a ValidationResult as human-readable text.

    Example output with violations::

        Repository structure validation failed:
        ❌ learn/topic/notes.txt: Only .md and image files allowed in learn

        Expected structure:
        ├── build/blueprints/[name]/
        ...
    """
    if result.passed:
        return "✅ Repository structure validation passed"

    lines = ["Repository structure validation failed:"]
    lines.extend(f"❌ {message}" for message in result.messages)
    lines.append("")
    lines.append("Expected structure:")
    lines.append(EXPECTED_STRUCTURE)
    return "\n".join(lines)


def format_json(result: ValidationResult) -> str:
    """Format a ValidationResult as structured JSON."""
    output: dict[str, object] = {
        "violations": [
            {
                "file_path": v.file_path,
                "rule_name": v.rule_name,
                "category": v.category,
                "message": v.message,
            }
            for v in result.violations
        ],
        "summary": {
            "passed": result.passed,
            "paths_checked": result.paths_checked,
            "violations_count": len(result.violations),
            "elapsed_ms": result.elapsed_ms,
        },
    }
    return json.dumps(output, ensure_ascii=False, indent=2)


def format_porcelain(result: ValidationResult) -> str:
    """Format as ``file_path:rule_name:category:message``, one violation per line."""
    return "\n".join(
        f"{v.file_path}:{v.rule_name}:{v.category}:{v.message}" for v in result.violations
    )
