"""Run orchestration: discovery, clone, analysis, cleanup passes, push, report."""

from __future__ import annotations

import asyncio
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, List, Optional, Sequence, Set

from .analysis.elements import ElementAnalyzer
from .config import ConfigError, RunConfig
from .git.client import GitClient
from .git.publisher import Publisher
from .github.client import GitHubClient
from .governor import ChangeGovernor
from .logging import get_logger
from .models import RepoDescriptor, RepositorySnapshot, Signature
from .pacing import Pacer
from .passes.base import PassRegistry
from .progress import gather_with_progress
from .report import RunReport
from .runner import PassRunner


@dataclass
class RunOptions:
    """Per-invocation choices, usually coming from the command line."""

    repos: Optional[Sequence[str]] = None
    passes: Optional[Sequence[str]] = None
    target_branch: Optional[str] = None
    pr_branch: str = "auto-cleanup"
    assignee: Optional[str] = None
    force_review: bool = False
    progress: bool = True


class RepositoryProcessingError(RuntimeError):
    """A failure while processing one repository, tagged with its identifier."""

    def __init__(self, identifier: str, cause: BaseException) -> None:
        super().__init__(f"Error updating {identifier}:\n{cause}")
        self.identifier = identifier
        self.cause = cause


class RunOrchestrator:
    """Coordinates one bot run across every repository in the fleet."""

    def __init__(
        self,
        config: RunConfig,
        *,
        registry: PassRegistry,
        git: GitClient,
        github: GitHubClient,
        token: Optional[str] = None,
        governor: Optional[ChangeGovernor] = None,
        analyzer: Optional[ElementAnalyzer] = None,
        pacer: Optional[Pacer] = None,
        emit: Callable[[str], None] = print,
    ) -> None:
        self.config = config
        self.registry = registry
        self.git = git
        self.github = github
        self.governor = governor or ChangeGovernor(config.max_changes)
        self.analyzer = analyzer or ElementAnalyzer()
        self.pacer = pacer or Pacer()
        self.runner = PassRunner(registry, config.passes)
        self.publisher = Publisher(
            github,
            self.governor,
            self.pacer,
            token=token,
            title=config.pull_request.title,
            body=config.pull_request.body,
            labels=config.pull_request.labels,
            write_delay=config.pull_request.delay,
        )
        self.emit = emit
        self.logger = get_logger("orchestrator")
        self.snapshots: Optional[List[RepositorySnapshot]] = None
        self.failures: List[RepositoryProcessingError] = []

    async def run(self, options: Optional[RunOptions] = None) -> RunReport:
        """Execute a full run and print the report.

        Raises the first repository failure after the report has been
        printed, so the process can exit non-zero.
        """
        options = options or RunOptions()
        self.snapshots = None
        self.failures = []
        try:
            await self._run(options)
            if self.failures:
                raise self.failures[0]
        except Exception:
            self._emit_partial_report()
            raise
        report = self.build_report()
        for line in report.render():
            self.emit(line)
        return report

    def build_report(self) -> RunReport:
        if self.snapshots is None:
            raise RuntimeError("No repositories were loaded")
        return RunReport.build(self.snapshots, self.governor)

    # ------------------------------------------------------------------
    # Phases

    async def _run(self, options: RunOptions) -> None:
        # Validate everything the user typed before touching any repository.
        selected = self.runner.resolve(options.passes)
        explicit = _parse_repo_selection(options.repos)
        required = _parse_repo_selection(
            sorted({repo for cleanup_pass in selected for repo in cleanup_pass.requires})
        ) or []
        if explicit is None and not self.config.org:
            raise ConfigError("No organization configured; set 'org' in the config or pass --repo")

        self._prepare_workspace()
        assignee = options.assignee or await self.github.get_authenticated_user()

        descriptors = await self._discover(explicit, required, options)
        self.snapshots = await self._materialise(descriptors, options)

        index = await asyncio.to_thread(
            self.analyzer.analyze, [snapshot.directory for snapshot in self.snapshots]
        )
        for snapshot in self.snapshots:
            snapshot.analysis = index

        excludes = set(self.config.excluded_identifiers())
        support_only = _support_only(explicit, required)
        targets = [
            snapshot
            for snapshot in self.snapshots
            if snapshot.identifier not in excludes
            and snapshot.descriptor.full_name.lower() not in support_only
        ]
        self.logger.info("Applying cleanup passes to %d repositories", len(targets))
        results = await gather_with_progress(
            [self._process(snapshot, options, assignee) for snapshot in targets],
            "Applying transforms...",
            enabled=options.progress,
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, RepositoryProcessingError):
                self.failures.append(result)
            elif isinstance(result, BaseException):
                raise result

    def _prepare_workspace(self) -> None:
        workspace = self.config.workspace
        if self.config.fresh_workspace and workspace.exists():
            self.logger.debug("Removing previous workspace %s", workspace)
            shutil.rmtree(workspace)
        workspace.mkdir(parents=True, exist_ok=True)

    async def _discover(
        self,
        explicit: Optional[List[tuple[str, str]]],
        required: List[tuple[str, str]],
        options: RunOptions,
    ) -> List[RepoDescriptor]:
        if explicit is not None:
            lookups = [
                self.github.get_repository(owner, name) for owner, name in [*explicit, *required]
            ]
            label = "Looking up selected repos..."
            found = await gather_with_progress(lookups, label, enabled=options.progress)
            return _dedupe(found)

        org = self.config.org
        if not org:
            raise ConfigError("No organization configured; set 'org' in the config or pass --repo")
        extras = _parse_repo_selection(self.config.extra_repositories) or []
        lookups = [
            self.github.get_repository(owner, name) for owner, name in [*extras, *required]
        ]
        results = await gather_with_progress(
            [*lookups, self.github.list_org_repositories(org)],
            f"Discovering repos in {org}...",
            enabled=options.progress,
        )
        descriptors: List[RepoDescriptor] = [*results[:-1], *results[-1]]
        return _dedupe(descriptors)

    async def _materialise(
        self, descriptors: Sequence[RepoDescriptor], options: RunOptions
    ) -> List[RepositorySnapshot]:
        author = Signature(self.config.author.name, self.config.author.email)
        target_branch = options.target_branch or self.config.target_branch

        async def _checkout(descriptor: RepoDescriptor) -> RepositorySnapshot:
            directory = self.config.workspace / descriptor.name
            if directory.exists():
                repository = self.git.open(directory)
            else:
                await self.pacer.wait(self.config.clone_delay)
                repository = await self.git.clone(descriptor.clone_url, directory)
            if target_branch:
                await repository.checkout_branch(target_branch)
            return RepositorySnapshot(
                directory=directory,
                descriptor=descriptor,
                repository=repository,
                author=author,
            )

        results = await gather_with_progress(
            [_checkout(descriptor) for descriptor in descriptors],
            "Cloning repos...",
            enabled=options.progress,
            return_exceptions=True,
        )
        for result in results:
            if isinstance(result, BaseException):
                raise result
        return list(results)

    async def _process(
        self, snapshot: RepositorySnapshot, options: RunOptions, assignee: Optional[str]
    ) -> None:
        target_branch = (
            options.target_branch or self.config.target_branch or snapshot.descriptor.default_branch
        )
        try:
            await snapshot.repository.create_branch_from_head(options.pr_branch)
            await self.runner.run(snapshot, options.passes)
            if options.force_review and snapshot.dirty:
                snapshot.escalate_to_needs_review()
            await self.publisher.push_changes(
                snapshot,
                local_branch=options.pr_branch,
                target_branch=target_branch,
                assignee=assignee,
            )
        except Exception as exc:
            self.logger.error("Error updating %s: %s", snapshot.identifier, exc)
            raise RepositoryProcessingError(snapshot.identifier, exc) from exc

    def _emit_partial_report(self) -> None:
        try:
            report = self.build_report()
            for line in report.render(include_summary=False):
                self.emit(line)
        except Exception as exc:
            self.logger.debug("Could not produce report after failure: %s", exc)


def _parse_repo_selection(values: Optional[Sequence[str]]) -> Optional[List[tuple[str, str]]]:
    if values is None:
        return None
    parsed: List[tuple[str, str]] = []
    for value in values:
        owner, _, name = value.strip().partition("/")
        if not owner or not name or "/" in name:
            raise ConfigError(f"Repositories must be given as owner/name, got '{value}'")
        parsed.append((owner, name))
    return parsed


def _support_only(
    explicit: Optional[List[tuple[str, str]]], required: List[tuple[str, str]]
) -> Set[str]:
    """Required repositories the user did not select; checked out but never cleaned."""
    if explicit is None:
        return set()
    selected = {f"{owner}/{name}".lower() for owner, name in explicit}
    return {f"{owner}/{name}".lower() for owner, name in required} - selected


def _dedupe(descriptors: Sequence[RepoDescriptor]) -> List[RepoDescriptor]:
    """Drop repeated repositories; two different repositories sharing a checkout name is an error."""
    seen: Dict[str, RepoDescriptor] = {}
    by_name: Dict[str, RepoDescriptor] = {}
    for descriptor in descriptors:
        if descriptor.full_name in seen:
            continue
        other = by_name.get(descriptor.name)
        if other is not None:
            raise ConfigError(
                f"{other.full_name} and {descriptor.full_name} would both be checked out "
                f"as '{descriptor.name}'; select only one of them"
            )
        seen[descriptor.full_name] = descriptor
        by_name[descriptor.name] = descriptor
    return list(seen.values())


__all__ = ["RepositoryProcessingError", "RunOptions", "RunOrchestrator"]
