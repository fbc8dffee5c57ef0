"""Replays a discovered group tree onto disk with ``git clone``."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from gl_mirror.models import DEFAULT_BRANCH, CloneResult, CommandResult, Group, Project
from gl_mirror.runner import run_command

Runner = Callable[..., CommandResult]


def build_clone_command(project: Project, branch: str = DEFAULT_BRANCH) -> list[str]:
    return ["git", "clone", "-b", branch, project.http_url_to_repo, project.path_with_namespace]


class CloneDispatcher:
    """
    Walks a populated group tree and clones every project into ``root``.

    A group's own projects are cloned before any of its sub-groups is entered.
    Nesting on disk comes from each project's ``path_with_namespace``; every
    clone runs with the same working directory. One failing project never
    stops the walk.
    """

    def __init__(
        self,
        branch: str = DEFAULT_BRANCH,
        use_default_branch: bool = False,
        dry_run: bool = False,
        timeout: float | None = None,
        runner: Runner = run_command,
    ):
        self.branch = branch
        self.use_default_branch = use_default_branch
        self.dry_run = dry_run
        self.timeout = timeout
        self.runner = runner
        self.logger = logging.getLogger("gl-mirror")
        self.results: list[CloneResult] = []
        self._visited: set[int] = set()

    def dispatch(self, group: Group, root: Path) -> None:
        if group.id in self._visited:
            return
        self._visited.add(group.id)

        for project in group.projects or ():
            self.clone_project(project, root)
        for subgroup in group.subgroups or ():
            self.dispatch(subgroup, root)

    def branch_for(self, project: Project) -> str:
        if self.use_default_branch and project.default_branch:
            return project.default_branch
        return self.branch

    def clone_project(self, project: Project, root: Path) -> CloneResult:
        command = build_clone_command(project, self.branch_for(project))
        self.logger.info(f"Cloning {project.path_with_namespace}: {' '.join(command)}")

        if self.dry_run:
            return self._record(
                CloneResult(
                    project_name=project.name,
                    path_with_namespace=project.path_with_namespace,
                    action="would_clone",
                    detail=f"branch={command[3]}",
                    dry_run=True,
                )
            )

        try:
            outcome = self.runner(command, cwd=root, timeout=self.timeout)
        except Exception as e:
            self.logger.exception(f"Clone of project '{project.name}' raised")
            return self._record(self._error(project, str(e)))

        if outcome.stdout:
            self.logger.debug(f"stdout: {outcome.stdout.rstrip()}")
        if outcome.stderr:
            # git reports progress on stderr, so only surface it loudly on failure
            level = logging.DEBUG if outcome.ok else logging.WARNING
            self.logger.log(level, f"stderr: {outcome.stderr.rstrip()}")

        if not outcome.ok:
            return self._record(self._error(project, outcome.describe()))

        return self._record(
            CloneResult(
                project_name=project.name,
                path_with_namespace=project.path_with_namespace,
                action="cloned",
                detail=f"branch={command[3]}",
            )
        )

    @staticmethod
    def _error(project: Project, detail: str) -> CloneResult:
        return CloneResult(
            project_name=project.name,
            path_with_namespace=project.path_with_namespace,
            action="error",
            detail=detail,
        )

    def _record(self, result: CloneResult) -> CloneResult:
        self.results.append(result)
        level = logging.ERROR if result.action == "error" else logging.INFO
        detail = f" ({result.detail})" if result.detail else ""
        message = f"{result.path_with_namespace} [{result.project_name}]: {result.action}{detail}"
        record = self.logger.makeRecord("gl-mirror", level, "", 0, message, (), None)
        record.clone_result = result
        self.logger.handle(record)
        return result
