"""Run configuration: command-line flags layered over environment variables."""

from __future__ import annotations

import argparse
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from gl_mirror.models import API_V4, DEFAULT_BRANCH, DEFAULT_GITLAB_URL, DEFAULT_MAX_RETRIES


class ConfigError(ValueError):
    """Raised when a required setting is missing or malformed."""


@dataclass(frozen=True)
class MirrorConfig:
    gitlab_url: str
    token: str
    group: str
    root_dir: Path = Path(".")
    api_version: str = API_V4
    ignores: frozenset[str] = field(default_factory=frozenset)
    branch: str = DEFAULT_BRANCH
    use_default_branch: bool = False
    dry_run: bool = False
    max_retries: int = DEFAULT_MAX_RETRIES
    clone_timeout: float | None = None


def parse_ignores(raw: str | None) -> set[str]:
    """Split a comma-separated name list, dropping blanks."""
    if not raw:
        return set()
    return {name.strip() for name in raw.split(",") if name.strip()}


def load_config(args: argparse.Namespace, environ: Mapping[str, str]) -> MirrorConfig:
    """Build a ``MirrorConfig``; flags win over ``GITLAB_*`` / ``GL_MIRROR_*`` environment variables."""
    token = environ.get("GITLAB_TOKEN")
    if not token:
        raise ConfigError("GITLAB_TOKEN environment variable is not set.")

    group = args.group or environ.get("GL_MIRROR_GROUP")
    if not group:
        raise ConfigError("No target group given (use --group or GL_MIRROR_GROUP).")

    if args.max_retries < 0:
        raise ConfigError(f"--max-retries must be >= 0, got {args.max_retries}")

    ignores = parse_ignores(environ.get("GL_MIRROR_IGNORES"))
    ignores.update(args.ignores or ())

    return MirrorConfig(
        gitlab_url=args.gitlab_url or environ.get("GITLAB_URL", DEFAULT_GITLAB_URL),
        token=token,
        group=group,
        root_dir=Path(args.root_dir or environ.get("GL_MIRROR_ROOT", ".")).expanduser(),
        api_version=args.api_version or environ.get("GITLAB_API_VERSION", API_V4),
        ignores=frozenset(ignores),
        branch=args.branch,
        use_default_branch=args.use_default_branch,
        dry_run=args.dry_run,
        max_retries=args.max_retries,
        clone_timeout=args.clone_timeout,
    )
