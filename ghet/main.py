"""Entry point for the ghet command line.

ghet prints the commits between two references of a Git repository as a
JSON release document for release-maker.

    ghet [LOCATION] [--start REF] [--end REF] [--branch BRANCH]
    ghet clear
    ghet cached
"""

import os
import shutil

# Point GitPython at the git executable before it is imported
if not os.getenv("GIT_PYTHON_GIT_EXECUTABLE"):
    git_path = shutil.which("git")
    if not git_path and os.name == "nt":
        common_paths = [
            r"C:\Program Files\Git\cmd\git.exe",
            r"C:\Program Files (x86)\Git\cmd\git.exe",
            os.path.join(os.getenv("LOCALAPPDATA", ""), "Programs", "Git", "cmd", "git.exe"),
        ]
        git_path = next((path for path in common_paths if os.path.exists(path)), None)
    if git_path:
        os.environ["GIT_PYTHON_GIT_EXECUTABLE"] = git_path

import argparse
import logging
import sys
from pathlib import Path

from ghet.services.release_service import build_release
from ghet.utils.errors import GhetError
from ghet.utils.repo_cache import RepoCache, default_cache_root

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
COMMANDS = ("log", "clear", "cached")
VALUE_OPTIONS = ("--cache-dir", "-s", "--start", "-e", "--end", "-b", "--branch")


def get_log_level(verbose: bool = False) -> str:
    """Get the log level from --verbose or the GHET_LOG_LEVEL environment variable.

    Returns:
        One of LOG_LEVELS. Defaults to "WARNING" if unset or invalid.
    """
    if verbose:
        return "DEBUG"
    raw = os.getenv("GHET_LOG_LEVEL", "WARNING").strip().upper()
    if raw in LOG_LEVELS:
        return raw
    return "WARNING"


def setup_logging(verbose: bool = False) -> None:
    # stdout carries the JSON document, so logs go to stderr
    logging.basicConfig(
        level=get_log_level(verbose),
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    raw = os.getenv("GHET_LOG_LEVEL", "").strip().upper()
    if raw and raw not in LOG_LEVELS:
        logger.warning(f"Invalid GHET_LOG_LEVEL value '{raw}'. Falling back to 'WARNING'.")


def _cache_from_args(args) -> RepoCache:
    return RepoCache(args.cache_dir if args.cache_dir else default_cache_root())


def cmd_log(args) -> int:
    """Print the release document for a commit range.

    Returns:
        Exit code (0 for success, 1 for errors)
    """
    try:
        release = build_release(
            args.location,
            args.start,
            args.end,
            branch=args.branch,
            cache=_cache_from_args(args),
        )
    except GhetError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1

    print(release.to_json())
    return 0


def cmd_clear(args) -> int:
    """Remove every cached clone."""
    cache = _cache_from_args(args)
    try:
        cache.clear()
    except OSError as e:
        print(f"error: could not clear cache {cache.root}: {e}", file=sys.stderr)
        return 1
    return 0


def cmd_cached(args) -> int:
    """List cached clones, one directory per line."""
    for path in _cache_from_args(args).repositories():
        print(path)
    return 0


def build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--cache-dir",
        type=Path,
        default=None,
        help="Directory holding cloned repositories (default: $GHET_CACHE_DIR or the user cache)",
    )
    common.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debug output to stderr",
    )

    parser = argparse.ArgumentParser(
        prog="ghet",
        description="Get a list of commits from a Git repository as a release-maker document",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    log_parser = subparsers.add_parser(
        "log",
        parents=[common],
        help="Print the commits between two references (default command)",
    )
    log_parser.add_argument(
        "location",
        nargs="?",
        default="",
        help="Directory path or URL of a Git repository (default: current directory)",
    )
    log_parser.add_argument(
        "-s",
        "--start",
        default=None,
        help="Branch, tag or commit where the list starts (default: tip of the default branch)",
    )
    log_parser.add_argument(
        "-e",
        "--end",
        default=None,
        help="Branch, tag or commit where the list ends, inclusive (default: the first commit)",
    )
    log_parser.add_argument(
        "-b",
        "--branch",
        default=None,
        help="Branch whose tip is used when --start is not given",
    )
    log_parser.set_defaults(func=cmd_log)

    clear_parser = subparsers.add_parser(
        "clear", parents=[common], help="Remove all cached clones"
    )
    clear_parser.set_defaults(func=cmd_clear)

    cached_parser = subparsers.add_parser(
        "cached", parents=[common], help="List cached clones"
    )
    cached_parser.set_defaults(func=cmd_cached)

    return parser


def _first_positional(argv: list[str]) -> int | None:
    """Return the index of the first token that is not an option or option value."""
    i = 0
    while i < len(argv):
        token = argv[i]
        if token == "--":
            return None
        if token in VALUE_OPTIONS:
            i += 2
            continue
        if not token.startswith("-") or token == "-":
            return i
        i += 1
    return None


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI."""
    argv = list(sys.argv[1:] if argv is None else argv)
    # "log" is implied unless another command is named, possibly after options
    index = _first_positional(argv)
    if index is not None and argv[index] in COMMANDS:
        argv = [argv[index], *argv[:index], *argv[index + 1 :]]
    elif not argv or argv[0] not in ("-h", "--help"):
        argv = ["log", *argv]

    args = build_parser().parse_args(argv)
    setup_logging(args.verbose)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
