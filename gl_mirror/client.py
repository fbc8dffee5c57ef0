"""GitLab API client for group and project discovery."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Iterable
from typing import Any

import requests

from gl_mirror.filters import filter_ignored
from gl_mirror.models import (
    API_V4,
    DEFAULT_MAX_RETRIES,
    PER_PAGE,
    RETRY_BACKOFF_FACTOR,
    RETRYABLE_STATUS_CODES,
    FetchResult,
    Group,
    Project,
    T,
)


class GitLabClient:
    """Read-only wrapper around the GitLab REST API group listings, with pagination and optional retries."""

    def __init__(
        self,
        base_url: str,
        token: str,
        api_version: str = API_V4,
        ignores: Iterable[str] = (),
        max_retries: int = DEFAULT_MAX_RETRIES,
        per_page: int = PER_PAGE,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_url = f"{self.base_url}/{api_version.strip('/')}"
        self.session = requests.Session()
        self.session.headers.update(
            {
                "PRIVATE-TOKEN": token,
                "Accept": "application/json",
                "Content-Type": "application/json",
            }
        )
        self.ignores = frozenset(ignores)
        self.max_retries = max_retries
        self.per_page = per_page
        self.logger = logging.getLogger("gl-mirror")

    def _request(self, method: str, endpoint: str, **kwargs) -> requests.Response:
        """Make an HTTP request, retrying transient failures up to ``max_retries`` times."""
        url = f"{self.api_url}{endpoint}"

        for attempt in range(self.max_retries + 1):
            try:
                self.logger.debug(
                    f"{method.upper()} {url} {kwargs.get('params', '')} "
                    f"(attempt {attempt + 1}/{self.max_retries + 1})"
                )
                resp = self.session.request(method, url, **kwargs)

                if resp.status_code in RETRYABLE_STATUS_CODES and attempt < self.max_retries:
                    wait_time = self._calculate_backoff(resp, attempt)
                    self.logger.warning(f"Retryable error {resp.status_code}, waiting {wait_time:.1f}s before retry")
                    time.sleep(wait_time)
                    continue

                resp.raise_for_status()
                return resp

            except requests.exceptions.ConnectionError as e:
                if attempt < self.max_retries:
                    wait_time = RETRY_BACKOFF_FACTOR * (2**attempt)
                    self.logger.warning(f"Connection error, retrying in {wait_time:.1f}s: {e}")
                    time.sleep(wait_time)
                    continue
                raise

        raise RuntimeError("Unexpected retry loop exit")

    def _calculate_backoff(self, resp: requests.Response, attempt: int) -> float:
        """Calculate backoff time, respecting Retry-After header for 429s."""
        if resp.status_code == 429:
            retry_after = resp.headers.get("Retry-After")
            if retry_after:
                try:
                    return float(retry_after)
                except ValueError:
                    pass  # Fall through to exponential backoff
        return RETRY_BACKOFF_FACTOR * (2**attempt)

    def paginate(self, endpoint: str, params: dict | None = None) -> list[dict]:
        """Fetch all pages of a paginated endpoint. Raises on any failed page."""
        params = dict(params or {})
        params.setdefault("per_page", self.per_page)
        page = 1
        results: list[dict] = []
        while True:
            params["page"] = page
            resp = self._request("GET", endpoint, params=params)
            data = resp.json()
            if not isinstance(data, list):
                raise ValueError(f"expected a JSON array from {endpoint}, got {type(data).__name__}")
            if not data:
                break
            results.extend(data)
            total_pages = int(resp.headers.get("x-total-pages", page))
            if page >= total_pages:
                break
            page += 1
        return results

    def _fetch(self, endpoint: str, parse: Callable[[dict[str, Any]], T]) -> FetchResult[T]:
        """Run a list request, folding every failure into a ``FetchResult`` carrying the cause."""
        try:
            items = [parse(item) for item in self.paginate(endpoint)]
        except requests.HTTPError as e:
            status = e.response.status_code if e.response is not None else "?"
            return self._failed(endpoint, f"HTTP {status}")
        except requests.RequestException as e:
            return self._failed(endpoint, f"request failed: {e}")
        except (ValueError, KeyError, TypeError) as e:
            return self._failed(endpoint, f"unexpected response: {e}")
        return FetchResult(items=items)

    def _failed(self, endpoint: str, cause: str) -> FetchResult:
        self.logger.warning(f"GET {endpoint} failed ({cause}); treating as empty")
        return FetchResult.failure(cause)

    # -- Listings --

    def list_groups(self) -> FetchResult[Group]:
        """All groups visible to the token. Not filtered by the ignore set."""
        return self._fetch("/groups", Group.from_api)

    def list_subgroups(self, group_id: int) -> FetchResult[Group]:
        result = self._fetch(f"/groups/{group_id}/subgroups", Group.from_api)
        return FetchResult(items=filter_ignored(result.items, self.ignores), error=result.error)

    def list_projects(self, group_id: int) -> FetchResult[Project]:
        result = self._fetch(f"/groups/{group_id}/projects", Project.from_api)
        return FetchResult(items=filter_ignored(result.items, self.ignores), error=result.error)
