"""Command-line argument parsing for git-worktree-keeper."""

import argparse
from typing import Optional, Sequence

from git_worktree_keeper.__version__ import __version__


def _add_no_fetch(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-n", "--no-fetch", action="store_true", help="Skip fetching remotes"
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with one subcommand per operation."""
    parser = argparse.ArgumentParser(
        prog="gwt",
        description="Create, list and safely remove git worktrees in a bare-repository layout",
        epilog="Setup: 'gwt clone URL', or 'gwt init' in an existing .bare layout.",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Show verbose output")
    parser.add_argument(
        "--debug", action="store_true", help="Show debug information for troubleshooting"
    )
    parser.add_argument("--version", action="version", version=f"git-worktree-keeper {__version__}")

    subparsers = parser.add_subparsers(dest="command", metavar="COMMAND")
    subparsers.required = True

    clone = subparsers.add_parser(
        "clone", help="Clone a repository into a new bare worktree layout"
    )
    clone.add_argument("url", help="Repository URL or path")
    clone.add_argument(
        "directory", nargs="?", help="Target directory (default: repository name)"
    )

    subparsers.add_parser("init", help="Initialize gwt in an existing bare worktree repo")

    add = subparsers.add_parser("add", help="Create a worktree from a local, remote or new branch")
    add.add_argument("name", help="Worktree and branch name")
    add.add_argument(
        "-f", "--from", dest="from_branch", metavar="BRANCH",
        help="Source branch for a new branch (default: configured default branch)",
    )
    _add_no_fetch(add)

    rm = subparsers.add_parser("rm", help="Remove worktree(s) and their branches")
    rm.add_argument("names", nargs="+", metavar="NAME", help="Worktree name(s)")
    rm.add_argument(
        "-f", "--force", action="store_true",
        help="Skip safety checks and force removal (at your own risk)",
    )

    ls = subparsers.add_parser("list", aliases=["ls"], help="List worktrees")
    output = ls.add_mutually_exclusive_group()
    output.add_argument("--json", action="store_true", help="Output as JSON")
    output.add_argument("--names", action="store_true", help="Output only worktree names")
    ls.add_argument("--clean", action="store_true", help="Only worktrees without uncommitted changes")
    ls.add_argument("--dirty", action="store_true", help="Only worktrees with uncommitted changes")
    ls.add_argument("--synced", action="store_true", help="Only worktrees in sync with remote")
    ls.add_argument("--ahead", action="store_true", help="Only worktrees ahead of remote")
    ls.add_argument("--behind", action="store_true", help="Only worktrees behind remote")
    ls.add_argument(
        "--no-remote", action="store_true", help="Only worktrees without a remote tracking branch"
    )
    _add_no_fetch(ls)

    sync = subparsers.add_parser("sync", help="Rebase a worktree onto its upstream branch")
    sync.add_argument("name", help="Worktree name")
    _add_no_fetch(sync)

    lock = subparsers.add_parser("lock", help="Lock a worktree to prevent removal")
    lock.add_argument("name", help="Worktree name")
    lock.add_argument("-r", "--reason", help="Lock reason")

    unlock = subparsers.add_parser("unlock", help="Unlock a worktree")
    unlock.add_argument("name", help="Worktree name")

    move = subparsers.add_parser("move", aliases=["mv"], help="Move a worktree inside the root")
    move.add_argument("name", help="Worktree name")
    move.add_argument("destination", help="New path relative to the repo root")

    run = subparsers.add_parser("run", help="Run a command in a worktree (use -- before child flags)")
    run.add_argument("-w", "--worktree", required=True, help="Worktree name")
    run.add_argument("cmd", nargs=argparse.REMAINDER, help="Command to run")

    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    args = build_parser().parse_args(argv)
    if args.command == "run" and args.cmd and args.cmd[0] == "--":
        args.cmd = args.cmd[1:]
    return args
