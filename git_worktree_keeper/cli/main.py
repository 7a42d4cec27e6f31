"""Command-line entry point for git-worktree-keeper"""

import argparse
import asyncio
import json
import re
import shutil
import sys
from pathlib import Path
from typing import Optional, Sequence

import git
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from git_worktree_keeper.__version__ import __version__
from git_worktree_keeper.cli.args import parse_args
from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import CLI_COLORS, COLUMNS
from git_worktree_keeper.context import RepoContext
from git_worktree_keeper.exceptions import (
    ExternalCommandError,
    GitWorktreeKeeperError,
    NotFoundError,
    SafetyViolation,
    ValidationError,
)
from git_worktree_keeper.formatters import format_issues, format_removal_report, format_worktree_row
from git_worktree_keeper.logging_config import get_logger, setup_logging
from git_worktree_keeper.models.results import ProvisionRoute, RemovalReport
from git_worktree_keeper.services.git import RefResolver, WorktreeService
from git_worktree_keeper.services.provisioner import WorktreeProvisioner
from git_worktree_keeper.services.removal import FORCE_HINT, RemovalExecutor
from git_worktree_keeper.services.status_service import StatusFilter, WorktreeStatusService
from git_worktree_keeper.services.validation_service import ValidationService

console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

ROUTE_DESCRIPTIONS = {
    ProvisionRoute.FROM_LOCAL: "from existing branch",
    ProvisionRoute.FROM_REMOTE: "tracking remote branch",
    ProvisionRoute.FROM_NEW_BRANCH: "as new branch",
}


def _managed_context(config: Config) -> RepoContext:
    context = RepoContext.discover(config=config)
    context.check_setup()
    return context


def _print_warning(message: str) -> None:
    err_console.print(f"[{CLI_COLORS['warning']}]Warning: {escape(message)}[/]")


def clone_directory_name(url: str) -> str:
    """Directory a clone of ``url`` lands in: its last path component without ``.git``."""
    name = re.split(r"[/:]", url.rstrip("/"))[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    return name


async def cmd_clone(args: argparse.Namespace, config: Config) -> int:
    """Clone a repository as ``<directory>/.bare`` and check out its default branch."""
    name = args.directory or clone_directory_name(args.url)
    if not name:
        raise ValidationError(f"Cannot derive a directory name from '{args.url}'")
    target = Path.cwd() / name
    if target.exists():
        raise ValidationError(f"Directory '{name}' already exists")

    console.print(f"Cloning {escape(args.url)} into {escape(name)}/")
    target.mkdir(parents=True)
    context = RepoContext(target, config=config)

    console.print("  Creating bare repository...")
    cloned = await context.runner.run("clone", "--bare", args.url, str(context.bare_path))
    if not cloned.ok:
        shutil.rmtree(target)
        cloned.check("clone repository")

    context.write_git_file()
    context.activate()

    console.print("  Configuring repository...")
    context.configure_remote_fetch()

    console.print("  Fetching branches...")
    fetched = await context.runner.run("fetch", "origin")
    fetched.check("fetch branches")

    resolver = RefResolver(context.runner, preferred_remote=config.preferred_remote)
    default_branch = await resolver.detect_default_branch()
    context.write_settings(version=__version__, default_branch=default_branch)
    console.print(f"  Default branch: {escape(default_branch)}")

    console.print(f"  Creating worktree '{escape(default_branch)}'...")
    result = await WorktreeProvisioner(context, resolver).provision(default_branch, fetch=False)
    if not result.created:
        raise ExternalCommandError("create worktree", result.diagnostic)

    console.print("")
    console.print(f"Done! Repository cloned to {escape(name)}/")
    console.print(f"  cd {escape(name)}/{escape(default_branch)}")
    return 0


async def cmd_init(args: argparse.Namespace, config: Config) -> int:
    """Mark the bare repository as managed and record its default branch."""
    context = RepoContext.discover(config=config)
    context.activate()

    if context.schema_version == __version__:
        console.print(f"Already initialized (v{__version__})")
        return 0
    if context.is_managed:
        console.print(f"Upgrading from v{context.schema_version} to v{__version__}...")
    else:
        console.print("Initializing gwt...")

    if context.write_git_file():
        console.print("  Created .git file")

    context.configure_remote_fetch()

    if not context.default_branch:
        resolver = RefResolver(context.runner, preferred_remote=config.preferred_remote)
        default_branch = await resolver.detect_default_branch()
        context.write_settings(default_branch=default_branch)
        console.print(f"  Default branch: {escape(default_branch)}")

    context.write_settings(version=__version__)
    console.print("")
    console.print(f"Done! Repository initialized for gwt v{__version__}")
    return 0


async def cmd_add(args: argparse.Namespace, config: Config) -> int:
    """Create a worktree, choosing a local, remote or new branch."""
    context = _managed_context(config)
    provisioner = WorktreeProvisioner(context)
    # Fail on a bad name before printing anything
    provisioner.validate(args.name)

    fetch = config.fetch and not args.no_fetch
    if fetch:
        console.print("Fetching remotes...")

    result = await provisioner.provision(args.name, from_branch=args.from_branch, fetch=fetch)
    for warning in result.warnings:
        _print_warning(str(warning))

    if not result.created:
        raise ExternalCommandError("create worktree", result.diagnostic)

    description = ROUTE_DESCRIPTIONS[result.route]
    if result.route is ProvisionRoute.FROM_NEW_BRANCH:
        description += f" from '{result.plan.start_point}'"
    console.print(f"Created worktree '{escape(args.name)}' {escape(description)}")
    console.print("")
    console.print(f"Done! Worktree created at {escape(args.name)}/")
    console.print(f"  cd {escape(args.name)}")
    return 0


def _report_removed(report: RemovalReport) -> None:
    for line in format_removal_report(report):
        console.print(f"[{CLI_COLORS['removed']}]{escape(line)}[/]")


def _report_failed(name: str, error: GitWorktreeKeeperError) -> None:
    color = CLI_COLORS["error"]
    if isinstance(error, SafetyViolation):
        err_console.print(f"[{color}]Cannot remove '{escape(name)}' due to safety checks:[/]")
        err_console.print(escape(format_issues(error.issues)))
        err_console.print(f"[{CLI_COLORS['dim']}]{FORCE_HINT} (at your own risk)[/]")
    elif isinstance(error, ExternalCommandError):
        err_console.print(f"[{color}]Error: {escape(str(error))}[/]")
        if error.hint:
            err_console.print(f"[{CLI_COLORS['dim']}]{escape(error.hint)}[/]")
    else:
        err_console.print(f"[{color}]Error: {escape(str(error))}[/]")


async def cmd_rm(args: argparse.Namespace, config: Config) -> int:
    """Remove every requested worktree, reporting failures at the end."""
    context = _managed_context(config)
    executor = RemovalExecutor(context)
    batch = await executor.remove_many(
        args.names, force=args.force, on_removed=_report_removed, on_failed=_report_failed
    )
    batch.raise_for_failures()
    return 0


async def cmd_list(args: argparse.Namespace, config: Config) -> int:
    """List worktrees as a table, names or JSON, optionally filtered."""
    context = _managed_context(config)
    context.activate()

    entries = await WorktreeService(context.runner, context.root).list_worktrees()
    if not entries:
        console.print("No worktrees found")
        return 0

    filters = StatusFilter(
        clean=args.clean,
        dirty=args.dirty,
        synced=args.synced,
        ahead=args.ahead,
        behind=args.behind,
        no_remote=args.no_remote,
    )
    if filters.needs_sync and config.fetch and not args.no_fetch:
        fetch = await context.runner.run("fetch", "--all")
        if not fetch.ok:
            _print_warning("Failed to fetch remotes")

    status_service = WorktreeStatusService(context.runner)
    statuses = await status_service.inspect_all(entries, include_sync=filters.needs_sync)
    statuses = [s for s in statuses if status_service.matches(s, filters)]

    if not statuses:
        console.print("No matching worktrees" if filters.active else "No worktrees found")
        return 0

    if args.json:
        payload = []
        for status in statuses:
            item = status.to_dict()
            if not filters.needs_sync:
                for key in ("sync", "upstream", "ahead", "behind"):
                    item.pop(key)
            payload.append(item)
        console.print_json(json.dumps(payload))
    elif args.names:
        for status in statuses:
            console.print(status.entry.name, highlight=False, markup=False, soft_wrap=True)
    else:
        table = Table(box=None, show_header=True, pad_edge=False)
        for column in COLUMNS:
            table.add_column(column.label, width=column.width or None, no_wrap=True)
        for status in statuses:
            table.add_row(*(escape(cell) for cell in format_worktree_row(status.entry, status)))
        console.print(table)
    return 0


async def cmd_sync(args: argparse.Namespace, config: Config) -> int:
    """Fetch remotes, then rebase a worktree onto its upstream branch."""
    context = _managed_context(config)
    context.activate()

    if config.fetch and not args.no_fetch:
        console.print("Fetching remotes...")
        fetched = await context.runner.run("fetch", "--all")
        if not fetched.ok:
            _print_warning("Failed to fetch remotes")

    entry = await WorktreeService(context.runner, context.root).find(args.name)
    if entry is None:
        raise NotFoundError(args.name)

    console.print(f"Syncing '{escape(entry.name)}'...")
    result = await context.runner.run("-C", entry.path, "pull", "--rebase")
    result.check("sync")
    if result.output:
        console.print(result.output, highlight=False, markup=False)
    console.print(f"Done! '{escape(entry.name)}' is up to date")
    return 0


async def cmd_lock(args: argparse.Namespace, config: Config) -> int:
    ValidationService.validate_name(args.name)
    context = _managed_context(config)
    context.activate()
    await WorktreeService(context.runner, context.root).lock(args.name, args.reason)
    suffix = f": {args.reason}" if args.reason else ""
    console.print(f"Locked '{escape(args.name)}'{escape(suffix)}")
    return 0


async def cmd_unlock(args: argparse.Namespace, config: Config) -> int:
    ValidationService.validate_name(args.name)
    context = _managed_context(config)
    context.activate()
    await WorktreeService(context.runner, context.root).unlock(args.name)
    console.print(f"Unlocked '{escape(args.name)}'")
    return 0


async def cmd_move(args: argparse.Namespace, config: Config) -> int:
    ValidationService.validate_name(args.name)
    context = _managed_context(config)
    context.activate()
    await WorktreeService(context.runner, context.root).move(args.name, args.destination)
    console.print(f"Moved '{escape(args.name)}' to '{escape(args.destination)}'")
    return 0


async def cmd_run(args: argparse.Namespace, config: Config) -> int:
    """Run a command inside a worktree and return its exit code."""
    if not args.cmd:
        raise ValidationError("run requires a command")
    context = _managed_context(config)
    context.activate()

    entry = await WorktreeService(context.runner, context.root).find(args.worktree)
    if entry is None:
        raise NotFoundError(args.worktree)
    logger.debug(f"run in {entry.path}: {args.cmd}")
    return await context.runner.passthrough(args.cmd, entry.path)


COMMANDS = {
    "clone": cmd_clone,
    "init": cmd_init,
    "add": cmd_add,
    "rm": cmd_rm,
    "list": cmd_list,
    "ls": cmd_list,
    "lock": cmd_lock,
    "unlock": cmd_unlock,
    "move": cmd_move,
    "mv": cmd_move,
    "sync": cmd_sync,
    "run": cmd_run,
}


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the application."""
    parsed_args = parse_args(argv)
    setup_logging(verbose=parsed_args.verbose, debug=parsed_args.debug)

    try:
        config = Config(verbose=parsed_args.verbose, debug=parsed_args.debug)
        if parsed_args.debug:
            console.print("[yellow]Debug mode enabled[/yellow]")
            for key, value in config.to_dict().items():
                console.print(f"  {key}: {value}")

        return asyncio.run(COMMANDS[parsed_args.command](parsed_args, config))
    except KeyboardInterrupt:
        err_console.print("\n[yellow]Operation cancelled by user[/yellow]")
        return 130
    except (GitWorktreeKeeperError, git.exc.GitError, ValueError) as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red]")
        hint = getattr(e, "hint", None)
        if hint:
            err_console.print(f"[dim]{escape(hint)}[/dim]")
        if parsed_args.debug:
            err_console.print_exception()
        return 1


if __name__ == "__main__":
    sys.exit(main())
