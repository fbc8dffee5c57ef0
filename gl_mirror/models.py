"""Data models and constants for gl-mirror."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Generic, TypeVar

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_GITLAB_URL = "https://gitlab.com"
API_V4 = "/api/v4"
PER_PAGE = 100

DEFAULT_BRANCH = "master"

# Retry configuration. Fetches are not retried unless asked for.
DEFAULT_MAX_RETRIES = 0
RETRY_BACKOFF_FACTOR = 0.5  # seconds
RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class CommandStatus(Enum):
    SUCCESS = "success"
    NONZERO_EXIT = "nonzero_exit"
    LAUNCH_FAILED = "launch_failed"


# ---------------------------------------------------------------------------
# Data Classes
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Project:
    """A repository owned by exactly one group."""

    id: int
    name: str
    http_url_to_repo: str
    path_with_namespace: str
    default_branch: str | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Project:
        return cls(
            id=data["id"],
            name=data["name"],
            http_url_to_repo=data["http_url_to_repo"],
            path_with_namespace=data["path_with_namespace"],
            default_branch=data.get("default_branch"),
        )


@dataclass(frozen=True)
class Group:
    """
    A namespace node in the GitLab hierarchy.

    ``projects`` and ``subgroups`` stay ``None`` until the tree builder has
    visited the group; ``populated()`` sets both at once.
    """

    id: int
    name: str
    path: str = ""
    full_path: str = ""
    projects: tuple[Project, ...] | None = None
    subgroups: tuple[Group, ...] | None = None

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Group:
        return cls(
            id=data["id"],
            name=data["name"],
            path=data.get("path", ""),
            full_path=data.get("full_path", data.get("path", "")),
        )

    @property
    def is_populated(self) -> bool:
        return self.projects is not None and self.subgroups is not None

    def populated(self, projects: list[Project], subgroups: list[Group]) -> Group:
        return replace(self, projects=tuple(projects), subgroups=tuple(subgroups))

    def walk(self):
        """Yield this group and every descendant, pre-order."""
        yield self
        for subgroup in self.subgroups or ():
            yield from subgroup.walk()


@dataclass(frozen=True)
class FetchResult(Generic[T]):
    """Outcome of a list request: the items, or the reason the request failed."""

    items: list[T] = field(default_factory=list)
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failure(cls, error: str) -> FetchResult[T]:
        return cls(items=[], error=error)


@dataclass(frozen=True)
class CommandResult:
    """Outcome of one external process invocation."""

    status: CommandStatus
    returncode: int | None = None
    stdout: str = ""
    stderr: str = ""
    error: str = ""

    @property
    def ok(self) -> bool:
        return self.status is CommandStatus.SUCCESS

    def describe(self) -> str:
        if self.status is CommandStatus.LAUNCH_FAILED:
            return f"launch failed: {self.error}"
        if self.status is CommandStatus.NONZERO_EXIT:
            last_line = self.stderr.strip().splitlines()[-1] if self.stderr.strip() else ""
            return f"exit code {self.returncode}" + (f": {last_line}" if last_line else "")
        return "ok"


@dataclass
class CloneResult:
    """Result of a single clone attempt."""

    project_name: str
    path_with_namespace: str
    action: str  # "cloned", "would_clone", "error"
    detail: str = ""
    dry_run: bool = False

    def to_dict(self) -> dict:
        d = {
            "project": self.project_name,
            "path": self.path_with_namespace,
            "action": self.action,
            "detail": self.detail,
        }
        if self.dry_run:
            d["dry_run"] = True
        return d
