"""Recursive discovery of a group's sub-groups and projects."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from gl_mirror.client import GitLabClient
from gl_mirror.models import FetchResult, Group


def find_group(groups: Iterable[Group], name: str) -> Group | None:
    """Return the first group whose display name equals ``name``."""
    for group in groups:
        if group.name == name:
            return group
    return None


class TreeBuilder:
    """
    Builds the full, populated tree under a group.

    Traversal is depth-first pre-order: a group's projects and sub-groups are
    fetched before any sub-group is descended into. Each group id is fetched
    at most once; a repeated id (a cycle, or a group reachable twice) is
    skipped and left unpopulated.
    """

    def __init__(self, client: GitLabClient):
        self.client = client
        self.logger = logging.getLogger("gl-mirror")
        self.visited: set[int] = set()
        self.failures: list[tuple[Group, FetchResult]] = []

    def build(self, group: Group) -> Group:
        if group.id in self.visited:
            self.logger.warning(f"Group '{group.name}' (id={group.id}) already visited, not descending again")
            return group
        self.visited.add(group.id)

        projects = self._checked(group, self.client.list_projects(group.id))
        subgroups = self._checked(group, self.client.list_subgroups(group.id))
        self.logger.info(f"Group '{group.name}': {len(projects)} projects, {len(subgroups)} subgroups")

        children = [self.build(subgroup) for subgroup in subgroups]
        return group.populated(projects, children)

    def _checked(self, group: Group, result: FetchResult) -> list:
        if not result.ok:
            self.failures.append((group, result))
        return result.items
