"""Command-line interface for minivcs.

This is the only place that prints. Operation failures are reported as their
message on stdout. Usage-level failures exit 0, matching the historical
behavior of the tool; a damaged repository exits 1.
"""

from __future__ import annotations

import sys
from argparse import ArgumentParser, Namespace
from collections.abc import Sequence
from pathlib import Path

from minivcs import __version__
from minivcs.config import ConfigValidationError
from minivcs.core.errors import (
    CorruptObjectError,
    CorruptStateError,
    NotInitializedError,
    VCSError,
)
from minivcs.core.models import Commit, StatusReport
from minivcs.core.repository import Repository
from minivcs.utils.logger import configure_structlog, get_logger

logger = get_logger("cli")

# `checkout [COMMIT] -- FILE` is rewritten to `checkout [COMMIT] --file FILE`
# before parsing so the bare separator keeps its meaning.
_FILE_SEPARATOR = "--"


def build_parser() -> ArgumentParser:
    parser = ArgumentParser(prog="minivcs", description="A small local VCS")
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument(
        "--workdir",
        default=".",
        help="Working directory of the repository (default: current directory)",
    )
    parser.add_argument(
        "--log-format",
        choices=["pretty", "json"],
        help="Log format (pretty or json). Overrides config and MINIVCS_LOG_FORMAT.",
    )
    parser.add_argument(
        "--log-level",
        choices=["debug", "info", "warning", "error"],
        help="Log level. Overrides config and MINIVCS_LOG_LEVEL.",
    )

    sub = parser.add_subparsers(dest="command")
    sub.add_parser("init", help="Create a repository in the working directory")

    add = sub.add_parser("add", help="Stage files for the next commit")
    add.add_argument("files", nargs="+")

    commit = sub.add_parser("commit", help="Record the staged changes")
    commit.add_argument("message", nargs="?", default="")

    rm = sub.add_parser("rm", help="Unstage a file or stage its removal")
    rm.add_argument("file")

    sub.add_parser("log", help="History of the current commit")
    sub.add_parser("global-log", help="Every commit ever made")

    find = sub.add_parser("find", help="Ids of commits with the given message")
    find.add_argument("message")

    sub.add_parser("status", help="Branches, staged changes and working files")

    branch = sub.add_parser("branch", help="Create a branch at the current commit")
    branch.add_argument("name")

    rm_branch = sub.add_parser("rm-branch", help="Delete a branch pointer")
    rm_branch.add_argument("name")

    checkout = sub.add_parser(
        "checkout",
        help="Switch branch, detach at a commit, or restore a file",
        usage="minivcs checkout BRANCH | -- FILE | COMMIT -- FILE | --detach COMMIT",
    )
    checkout.add_argument("target", nargs="?")
    checkout.add_argument("--file", dest="file")
    checkout.add_argument("--detach", action="store_true")

    reset = sub.add_parser("reset", help="Check out a commit and move the branch")
    reset.add_argument("commit")

    return parser


def _rewrite_checkout_separator(argv: list[str]) -> list[str]:
    if "checkout" not in argv:
        return argv
    start = argv.index("checkout")
    if _FILE_SEPARATOR not in argv[start:]:
        return argv
    sep = argv.index(_FILE_SEPARATOR, start)
    return [*argv[:sep], "--file", *argv[sep + 1 :]]


def format_commit(commit: Commit) -> str:
    date = commit.timestamp.astimezone().strftime("%a %b %d %H:%M:%S %Y %z")
    return f"===\ncommit {commit.id}\nDate: {date}\n{commit.message}\n"


def format_status(report: StatusReport) -> str:
    lines = ["=== Branches ==="]
    for name in report.branches:
        lines.append(f"*{name}" if name == report.current_branch else name)
    lines += ["", "=== Staged Files ===", *report.staged]
    lines += ["", "=== Removed Files ===", *report.removed]
    lines += ["", "=== Modifications Not Staged For Commit ==="]
    lines += [f"{change.path} ({change.kind})" for change in report.unstaged]
    lines += ["", "=== Untracked Files ===", *report.untracked, ""]
    return "\n".join(lines)


def _dispatch(repo: Repository, args: Namespace) -> None:
    command = args.command
    if command == "init":
        repo.init()
    elif command == "add":
        for path in args.files:
            repo.add(path)
    elif command == "commit":
        repo.commit(args.message)
    elif command == "rm":
        repo.remove(args.file)
    elif command == "log":
        for commit in repo.log():
            print(format_commit(commit))
    elif command == "global-log":
        for commit in repo.global_log():
            print(format_commit(commit))
    elif command == "find":
        for commit_id in repo.find_by_message(args.message):
            print(commit_id)
    elif command == "status":
        print(format_status(repo.status()))
    elif command == "branch":
        repo.create_branch(args.name)
    elif command == "rm-branch":
        repo.delete_branch(args.name)
    elif command == "checkout":
        _checkout(repo, args)
    elif command == "reset":
        repo.reset(args.commit)


def _checkout(repo: Repository, args: Namespace) -> None:
    if args.file and args.target:
        repo.checkout_commit_file(args.target, args.file)
    elif args.file:
        repo.checkout_file(args.file)
    elif args.target and args.detach:
        repo.checkout_commit(args.target)
    elif args.target:
        repo.checkout_branch(args.target)
    else:
        print("Incorrect operands.")


def main(argv: Sequence[str] | None = None) -> int:
    """Run one command and return the process exit code."""
    raw = list(sys.argv[1:] if argv is None else argv)
    parser = build_parser()
    args = parser.parse_args(_rewrite_checkout_separator(raw))

    configure_structlog(log_format=args.log_format, log_level=args.log_level)

    if args.command is None:
        print("Please enter a command.")
        return 0

    workdir = Path(args.workdir).expanduser()
    if not workdir.is_dir():
        print(f"Not a directory: {workdir}")
        return 1

    try:
        repo = Repository(workdir)
        if repo.settings is not None:
            configure_structlog(
                log_format=args.log_format or repo.settings.log_format,
                log_colors=repo.settings.log_colors,
                log_level=args.log_level or repo.settings.log_level,
            )
        if args.command != "init" and not repo.is_initialized():
            raise NotInitializedError()
        _dispatch(repo, args)
    except (CorruptObjectError, CorruptStateError) as e:
        logger.error("Repository is damaged", error=str(e))
        print(e)
        return 1
    except ConfigValidationError as e:
        print(f"Invalid configuration: {e}")
        return 1
    except VCSError as e:
        logger.debug("Command failed", command=args.command, error=str(e))
        print(e)
    return 0
