"""Ignore-set filtering for groups and projects."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, TypeVar


class Named(Protocol):
    name: str


N = TypeVar("N", bound=Named)


def filter_ignored(entries: Iterable[N], ignores: Iterable[str]) -> list[N]:
    """Drop every entry whose name is in ``ignores`` (exact, case-sensitive), keeping order."""
    ignored = frozenset(ignores)
    return [entry for entry in entries if entry.name not in ignored]
