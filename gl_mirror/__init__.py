"""
gl-mirror: Clone a whole GitLab group hierarchy onto local disk.

Finds the named group among the groups visible to the token, walks its
sub-groups and projects (skipping ignored names), then runs ``git clone`` for
every project into ``<root>/<path_with_namespace>``.

Environment:
    GITLAB_TOKEN - GitLab Personal Access Token (required)
    GITLAB_URL   - GitLab instance URL (default: https://gitlab.com)
"""

from gl_mirror.cli import main

__version__ = "0.1.0"
__all__ = ["main", "__version__"]
