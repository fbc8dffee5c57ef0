"""Shared test fixtures for gl-mirror tests."""

import argparse
import sys
from pathlib import Path
from typing import Any

import pytest

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from gl_mirror.client import GitLabClient
from gl_mirror.models import CommandResult, CommandStatus

# Constants for use in tests - pytest makes conftest.py fixtures available,
# but these constants need to be imported directly from tests
MOCK_GITLAB_URL = "https://gitlab.example.com"
MOCK_API_URL = f"{MOCK_GITLAB_URL}/api/v4"


class FakeRunner:
    """Stands in for run_command; records every invocation and answers from a script."""

    def __init__(self, fail_on: set[str] | None = None, raise_on: set[str] | None = None):
        self.calls: list[tuple[list[str], Path]] = []
        self.fail_on = fail_on or set()
        self.raise_on = raise_on or set()

    def __call__(self, command, cwd, timeout=None):
        self.calls.append((list(command), cwd))
        target = command[-1]
        if target in self.raise_on:
            raise OSError(f"cannot launch for {target}")
        if target in self.fail_on:
            return CommandResult(
                status=CommandStatus.NONZERO_EXIT,
                returncode=128,
                stderr="fatal: Remote branch master not found in upstream origin\n",
            )
        return CommandResult(status=CommandStatus.SUCCESS, returncode=0, stderr="Cloning into '...'\n")

    @property
    def targets(self) -> list[str]:
        return [command[-1] for command, _ in self.calls]


@pytest.fixture
def mock_client():
    """GitLabClient pointing at mock server."""
    return GitLabClient(MOCK_GITLAB_URL, "test-token")


@pytest.fixture
def fake_runner():
    return FakeRunner()


def api_group(group_id: int, name: str, parent: str = "") -> dict[str, Any]:
    full_path = f"{parent}/{name}" if parent else name
    return {"id": group_id, "name": name, "path": name, "full_path": full_path}


def api_project(project_id: int, name: str, namespace: str) -> dict[str, Any]:
    return {
        "id": project_id,
        "name": name,
        "http_url_to_repo": f"{MOCK_GITLAB_URL}/{namespace}/{name}.git",
        "path_with_namespace": f"{namespace}/{name}",
        "default_branch": "main",
    }


@pytest.fixture
def nested_group_structure() -> dict[str, Any]:
    """
    org (1)
      shared
      team-a (2)
        service, frontend
        infra (4)
          terraform
      team-b (3)
    """
    return {
        "groups": [api_group(7, "frontend"), api_group(1, "org"), api_group(9, "other")],
        "subgroups": {
            1: [api_group(2, "team-a", "org"), api_group(3, "team-b", "org")],
            2: [api_group(4, "infra", "org/team-a")],
            3: [],
            4: [],
        },
        "projects": {
            1: [api_project(10, "shared", "org")],
            2: [api_project(11, "service", "org/team-a"), api_project(12, "frontend", "org/team-a")],
            3: [],
            4: [api_project(13, "terraform", "org/team-a/infra")],
        },
    }


def make_args(**kwargs) -> argparse.Namespace:
    """Helper to create argparse.Namespace with default values."""
    defaults = {
        "group": None,
        "root_dir": None,
        "ignores": [],
        "gitlab_url": None,
        "api_version": None,
        "branch": "master",
        "use_default_branch": False,
        "max_retries": 0,
        "clone_timeout": None,
        "dry_run": False,
        "json_output": False,
        "verbose": False,
    }
    defaults.update(kwargs)
    return argparse.Namespace(**defaults)


def register_structure(rsps, struct: dict[str, Any]) -> None:
    """Register every listing of ``struct`` on a ``responses`` mock."""
    rsps.add(rsps.GET, f"{MOCK_API_URL}/groups", json=struct["groups"], headers={"x-total-pages": "1"})
    for group_id, subgroups in struct["subgroups"].items():
        rsps.add(rsps.GET, f"{MOCK_API_URL}/groups/{group_id}/subgroups", json=subgroups)
    for group_id, projects in struct["projects"].items():
        rsps.add(rsps.GET, f"{MOCK_API_URL}/groups/{group_id}/projects", json=projects)
