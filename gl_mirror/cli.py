"""CLI entry point for gl-mirror."""

from __future__ import annotations

import argparse
import os
import sys

from gl_mirror.client import GitLabClient
from gl_mirror.cloner import CloneDispatcher, Runner
from gl_mirror.config import ConfigError, MirrorConfig, load_config
from gl_mirror.logging_utils import setup_logging
from gl_mirror.models import DEFAULT_BRANCH, DEFAULT_MAX_RETRIES
from gl_mirror.runner import run_command
from gl_mirror.tree import TreeBuilder, find_group


def mirror(config: MirrorConfig, client: GitLabClient | None = None, runner: Runner = run_command) -> int:
    """Discover the target group's tree and clone every project in it. Returns the exit code."""
    import logging

    logger = logging.getLogger("gl-mirror")

    if client is None:
        client = GitLabClient(
            base_url=config.gitlab_url,
            token=config.token,
            api_version=config.api_version,
            ignores=config.ignores,
            max_retries=config.max_retries,
        )

    groups = client.list_groups()
    if not groups.items:
        logger.info("No groups visible to this token" + (f" ({groups.error})" if groups.error else ""))
        return 0

    target = find_group(groups.items, config.group)
    if target is None:
        logger.info(f"Group '{config.group}' not found among {len(groups.items)} groups")
        return 0

    logger.info(f"Resolved group '{target.name}' (id={target.id})")
    builder = TreeBuilder(client)
    tree = builder.build(target)
    logger.info(f"Discovered {sum(1 for _ in tree.walk())} groups under '{target.name}'")

    if config.dry_run:
        logger.info("DRY-RUN MODE - nothing will be cloned")
    elif not config.root_dir.is_dir():
        # Each clone will fail to launch; git only creates directories below the root
        logger.error(f"Root directory '{config.root_dir}' does not exist or is not a directory")

    dispatcher = CloneDispatcher(
        branch=config.branch,
        use_default_branch=config.use_default_branch,
        dry_run=config.dry_run,
        timeout=config.clone_timeout,
        runner=runner,
    )
    dispatcher.dispatch(tree, config.root_dir.resolve())

    # Summary
    total = len(dispatcher.results)
    cloned = sum(1 for r in dispatcher.results if r.action in ("cloned", "would_clone"))
    errors = sum(1 for r in dispatcher.results if r.action == "error")

    logger.info(
        f"Done: {total} projects, {cloned} {'would be cloned' if config.dry_run else 'cloned'}, "
        f"{errors} errors, {len(builder.failures)} failed fetches"
    )

    return 1 if errors > 0 else 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="gl-mirror",
        description="Clone every project of a GitLab group and its sub-groups into a matching directory tree.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Environment:
    GITLAB_TOKEN        - GitLab Personal Access Token (required)
    GITLAB_URL          - GitLab instance URL (default: https://gitlab.com)
    GITLAB_API_VERSION  - API path segment (default: /api/v4)
    GL_MIRROR_GROUP     - Display name of the group to mirror
    GL_MIRROR_ROOT      - Local directory to clone into (default: .)
    GL_MIRROR_IGNORES   - Comma-separated group/project names to skip

Examples:
    # Mirror the "backend" group into ~/src
    gl-mirror --group backend --root ~/src

    # Skip a few projects and sub-groups by name
    gl-mirror --group backend --ignore legacy --ignore sandbox

    # Show what would be cloned
    gl-mirror --group backend --dry-run
""",
    )
    parser.add_argument("--group", default=None, help="Display name of the group to mirror")
    parser.add_argument("--root", dest="root_dir", default=None, help="Local directory to clone into")
    parser.add_argument(
        "--ignore",
        dest="ignores",
        action="append",
        default=[],
        help="Group or project name to skip (repeatable, exact match)",
    )
    parser.add_argument(
        "--gitlab-url", default=None, help="GitLab instance URL (default: from GITLAB_URL env or https://gitlab.com)"
    )
    parser.add_argument("--api-version", default=None, help="API path segment (default: /api/v4)")
    parser.add_argument("--branch", default=DEFAULT_BRANCH, help=f"Branch to clone (default: {DEFAULT_BRANCH})")
    parser.add_argument(
        "--use-default-branch",
        action="store_true",
        help="Clone each project's own default branch, falling back to --branch",
    )
    parser.add_argument(
        "--max-retries",
        type=int,
        default=DEFAULT_MAX_RETRIES,
        help=f"Maximum retry attempts for transient API errors (default: {DEFAULT_MAX_RETRIES})",
    )
    parser.add_argument("--clone-timeout", type=float, default=None, help="Seconds to allow each clone (default: none)")
    parser.add_argument("--dry-run", action="store_true", help="Show what would be cloned without running git")
    parser.add_argument(
        "--json", action="store_true", dest="json_output", help="Output results as JSON lines (to stderr)"
    )
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(args, os.environ)
    except ConfigError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    logger = setup_logging(json_mode=args.json_output, verbose=args.verbose)

    try:
        return mirror(config)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
