"""Layoutguard CLI entry point."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

import click

from layoutguard import __version__

if TYPE_CHECKING:
    from rich.console import Console

    from layoutguard.config import LayoutConfig


@click.group()
@click.version_option(version=__version__, prog_name="layoutguard")
@click.option("--verbose", "-v", is_flag=True, help="Verbose output.")
@click.option("--quiet", "-q", is_flag=True, help="Minimal output (errors only).")
@click.pass_context
def main(ctx: click.Context, *, verbose: bool, quiet: bool) -> None:
    """Layoutguard - directory layout checks for documentation repositories."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["quiet"] = quiet
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")


_project_option = click.option(
    "--project",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    help="Project root (default: current directory).",
)

_config_option = click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Config file (default: .layoutguard.yml in the project root).",
)


def _load_config_or_exit(project_root: Path, config_path: Path | None) -> LayoutConfig:
    from layoutguard.config import ConfigError, load_config

    try:
        return load_config(project_root, config_path)
    except ConfigError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(2)


@main.command()
@click.argument("paths", nargs=-1)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["rich", "json", "porcelain"]),
    default="rich",
    help="Output format (default: rich).",
)
@_project_option
@_config_option
@click.pass_context
def check(
    ctx: click.Context,
    paths: tuple[str, ...],
    *,
    fmt: str,
    project: Path | None,
    config_path: Path | None,
) -> None:
    """Check staged files (or PATHS) against the repository layout.

    PATHS are relative to --project.  Staged files are relative to the
    repository root, so that root is used for listings and config lookup.

    Exit codes: 0 = layout is valid or staged files are unavailable,
    1 = violations found, 2 = configuration error.
    """
    from layoutguard.git import GitError, repository_root, staged_files
    from layoutguard.validator import (
        filesystem_lister,
        format_json,
        format_porcelain,
        format_rich,
        validate,
    )

    project_root = project or Path.cwd()

    candidates: list[str]
    if paths:
        candidates = list(paths)
    else:
        try:
            project_root = repository_root(project_root)
            candidates = staged_files(project_root)
        except GitError:
            click.echo("Warning: Could not get staged files, skipping structure validation")
            return

    config = _load_config_or_exit(project_root, config_path)
    result = validate(candidates, filesystem_lister(project_root), config=config)

    formatters = {
        "rich": format_rich,
        "json": format_json,
        "porcelain": format_porcelain,
    }
    quiet = ctx.obj.get("quiet", False) if ctx.obj else False
    if not (quiet and result.passed and fmt == "rich"):
        output = formatters[fmt](result)
        if output:
            click.echo(output)

    if not result.passed:
        sys.exit(1)


def render_layout(config: LayoutConfig, console: Console) -> None:
    """Render the expected structure for *config* as a Rich tree."""
    from rich.markup import escape
    from rich.tree import Tree

    extensions = ", ".join(sorted(config.allowed_extensions))
    tree = Tree("[bold]Expected structure[/]")
    for unit in config.content_units:
        branch = tree.add(f"[cyan]{escape(unit + '/[name]/')}[/]")
        branch.add(f"files: {extensions}")
    for category in config.categories:
        branch = tree.add(f"[green]{escape(category + '/[subdirectory]/')}[/]")
        branch.add(f"files: {extensions} (no deeper nesting)")
    console.print(tree)
    if config.source is not None:
        console.print(f"[dim]Config: {config.source}[/]")


@main.command()
@_project_option
@_config_option
def layout(*, project: Path | None, config_path: Path | None) -> None:
    """Show the expected repository structure."""
    from rich.console import Console

    project_root = project or Path.cwd()
    config = _load_config_or_exit(project_root, config_path)
    render_layout(config, Console())


HOOK_MARKER = "# pre-commit hook managed by layoutguard"

_HOOK_TEMPLATE_WARN = f"""\
#!/bin/sh
{HOOK_MARKER}
layoutguard check
if [ $? -eq 1 ]; then
  echo "Warning: repository structure violations found (commit not blocked)"
fi
exit 0
"""

_HOOK_TEMPLATE_BLOCK = f"""\
#!/bin/sh
{HOOK_MARKER}
layoutguard check
exit_code=$?

if [ $exit_code -eq 1 ]; then
  echo "Error: repository structure violations found, commit blocked"
  exit 1
fi

if [ $exit_code -eq 2 ]; then
  echo "Warning: layoutguard configuration is invalid, skipping structure check"
fi
"""


def _is_managed_hook(hook_path: Path) -> bool:
    try:
        return HOOK_MARKER in hook_path.read_text(encoding="utf-8", errors="replace")
    except OSError:
        return False


@main.command("install-hooks")
@click.option(
    "--mode",
    type=click.Choice(["warn", "block"]),
    default="block",
    help="Hook mode: block commits on violations (default) or only warn.",
)
@click.option("--remove", is_flag=True, help="Remove the layoutguard pre-commit hook.")
@click.option(
    "--force",
    is_flag=True,
    help="Replace or remove a pre-commit hook not written by layoutguard.",
)
@_project_option
def install_hooks(*, mode: str, remove: bool, force: bool, project: Path | None) -> None:
    """Install or remove the layoutguard pre-commit hook.

    The hooks directory is resolved by git, so linked worktrees, submodules
    and ``core.hooksPath`` are honored.  Exit code 1 when the project is not
    a repository or a foreign hook is in the way.
    """
    import stat

    from layoutguard.git import GitError, hooks_dir

    project_root = project or Path.cwd()
    try:
        hook_path = hooks_dir(project_root) / "pre-commit"
    except GitError as exc:
        click.echo(f"Error: not a git repository: {exc}", err=True)
        sys.exit(1)

    foreign = hook_path.exists() and not _is_managed_hook(hook_path)
    if foreign and not force:
        action = "remove" if remove else "overwrite"
        click.echo(
            f"Error: {hook_path} was not installed by layoutguard; "
            f"use --force to {action} it.",
            err=True,
        )
        sys.exit(1)

    if remove:
        if hook_path.exists():
            hook_path.unlink()
            click.echo(f"Removed pre-commit hook {hook_path}.")
        else:
            click.echo("No pre-commit hook to remove.")
        return

    template = _HOOK_TEMPLATE_BLOCK if mode == "block" else _HOOK_TEMPLATE_WARN
    if hook_path.is_file() and hook_path.read_text(encoding="utf-8") == template:
        click.echo(f"Pre-commit hook already installed (mode: {mode}).")
        return

    hook_path.parent.mkdir(parents=True, exist_ok=True)
    hook_path.write_text(template, encoding="utf-8")
    hook_path.chmod(hook_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    click.echo(f"Installed pre-commit hook at {hook_path} (mode: {mode}).")
