"""CLI entrypoint for repobot."""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

from .config import ConfigError, RunConfig, load_config, load_token
from .git.client import GitClient
from .github.client import GitHubClient
from .logging import configure_logging, get_logger
from .orchestrator import RunOptions, RunOrchestrator
from .passes import PassRegistry, build_registry


def _max_changes(value: str) -> int:
    if not value:
        return 0
    if value.isdigit():
        return int(value)
    raise argparse.ArgumentTypeError(f"invalid max changes, expected an integer: {value}")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="repobot",
        description="repobot is a friendly bot for doing mass changes to a fleet of repositories!",
    )
    parser.add_argument(
        "-c",
        "--max-changes",
        type=_max_changes,
        default=None,
        help="The maximum number of repos to push (default: config value, else 0).",
    )
    parser.add_argument(
        "-r",
        "--repo",
        dest="repos",
        action="append",
        metavar="OWNER/NAME",
        help="Only process this repository. May be given more than once.",
    )
    parser.add_argument(
        "-p",
        "--pass",
        dest="passes",
        action="append",
        metavar="NAME",
        help="Run this cleanup pass (in the order given) instead of the default passes.",
    )
    parser.add_argument(
        "-b",
        "--branch",
        default=None,
        help="Branch of each repository to start from and to push to.",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress bars.",
    )
    parser.add_argument(
        "--force-review",
        action="store_true",
        help="Send every change through a pull request, even ones that could be pushed directly.",
    )
    parser.add_argument(
        "--pr-branch",
        default=None,
        help="Name of the local and pull request branch (default: auto-cleanup).",
    )
    parser.add_argument(
        "--assignee",
        default=None,
        help="Assign pull requests to this user instead of the token owner.",
    )
    parser.add_argument(
        "--config",
        default="config.yml",
        help="Path to the run configuration file.",
    )
    parser.add_argument(
        "--token-file",
        default="token",
        help="File containing the GitHub token (falls back to $GITHUB_TOKEN).",
    )
    parser.add_argument("--org", default=None, help="Organization whose repositories are processed.")
    parser.add_argument("--workspace", default=None, help="Directory that holds the checkouts.")
    parser.add_argument(
        "--list-passes",
        action="store_true",
        help="Print the registered cleanup passes and exit.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Increase log verbosity for troubleshooting.",
    )
    parser.add_argument("--log-file", type=Path, default=None, help="Also write logs to this file.")
    return parser


def _apply_overrides(config: RunConfig, args: argparse.Namespace) -> None:
    if args.max_changes is not None:
        config.max_changes = args.max_changes
    if args.org:
        config.org = args.org
    if args.workspace:
        config.workspace = Path(args.workspace).expanduser().resolve()
    if args.pr_branch:
        config.pull_request.branch = args.pr_branch


def _describe_passes(registry: PassRegistry) -> list[str]:
    lines = []
    for cleanup_pass in registry.list():
        marker = "*" if cleanup_pass.runs_by_default else " "
        lines.append(f"{marker} {cleanup_pass.name:<16} {cleanup_pass.description}")
    lines.append("")
    lines.append("* runs by default")
    return lines


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint for repobot."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    configure_logging(verbose=bool(args.verbose), log_file=args.log_file)
    logger = get_logger("cli")

    try:
        registry = build_registry()
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    if args.list_passes:
        for line in _describe_passes(registry):
            print(line)
        return

    try:
        config = load_config(Path(args.config))
        _apply_overrides(config, args)
        token = load_token(Path(args.token_file))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")

    github = GitHubClient()
    github.authenticate(token)
    orchestrator = RunOrchestrator(
        config,
        registry=registry,
        git=GitClient(),
        github=github,
        token=token,
    )
    options = RunOptions(
        repos=args.repos,
        passes=args.passes,
        target_branch=args.branch,
        pr_branch=config.pull_request.branch,
        assignee=args.assignee,
        force_review=bool(args.force_review),
        progress=not args.no_progress,
    )

    try:
        asyncio.run(orchestrator.run(options))
    except ConfigError as exc:
        parser.exit(1, f"{exc}\n")
    except Exception as exc:
        logger.debug("Run failed", exc_info=True)
        parser.exit(1, f"repobot run failed: {exc}\nRun with --verbose for more details.\n")


if __name__ == "__main__":
    main(sys.argv[1:])
