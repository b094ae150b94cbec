"""Thin JIRA REST client.

Only fetches and decodes; records are handed back as plain dicts. Any
failure raises TrackerError and nothing is retried.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Iterator

import httpx

from .records import Record

log = logging.getLogger(__name__)

STATIC_FIELDS = ["summary", "issuetype", "status", "components", "labels", "issuelinks", "description"]


class TrackerError(Exception):
    """A request to the issue tracker failed."""


@dataclass
class JiraClient:
    base_url: str
    user: str
    password: str
    debug: bool = False
    timeout: float = 30.0
    transport: httpx.BaseTransport | None = None
    _http: httpx.Client = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._http = httpx.Client(
            base_url=self.base_url.strip(),
            auth=(self.user.strip(), self.password),
            timeout=self.timeout,
            headers={"Accept": "application/json"},
            transport=self.transport,
        )

    def close(self) -> None:
        self._http.close()

    def __enter__(self) -> "JiraClient":
        return self

    def __exit__(self, *exc) -> None:
        self.close()

    def _request(self, method: str, url: str, *, params: dict | None = None, body: Any = None) -> Any:
        if self.debug:
            log.debug("%s %s params=%s body=%s", method, url, params, json.dumps(body) if body is not None else "")
        try:
            resp = self._http.request(method, url, params=params, json=body)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            raise TrackerError(f"{method} {url} returned {exc.response.status_code}: {exc.response.text[:200]}") from exc
        except httpx.HTTPError as exc:
            raise TrackerError(f"{method} {url} failed: {exc}") from exc
        except ValueError as exc:
            raise TrackerError(f"{method} {url} returned malformed JSON: {exc}") from exc

    # ---- issues ----

    def search_issues(self, jql: str, start_at: int, max_results: int, fields: list[str]) -> dict:
        body = {"jql": jql, "startAt": start_at, "maxResults": max_results, "fields": fields}
        return self._request("POST", "rest/api/2/search", body=body)

    def iter_static_issue_pages(self, jql: str, page_size: int, fields: list[str]) -> Iterator[dict]:
        start_at = 0
        while True:
            page = self.search_issues(jql, start_at, page_size, fields)
            yield page
            start_at = page.get("startAt", start_at) + page.get("maxResults", page_size)
            if page.get("total", 0) <= start_at or not page.get("issues"):
                return

    def get_components(self, project: str) -> list[Record]:
        return self._request("GET", f"rest/api/2/project/{project}/components")

    # ---- agile ----

    def _paged_values(self, url: str, params: dict, key: str = "values") -> Iterator[Record]:
        start_at = 0
        while True:
            page = self._request("GET", url, params={**params, "startAt": start_at})
            values = page.get(key) or []
            yield from values
            start_at = page.get("startAt", start_at) + len(values)
            if page.get("isLast") or not values:
                return
            if "total" in page and page["total"] <= start_at:
                return

    def iter_boards(self, project: str, page_size: int = 100) -> Iterator[Record]:
        return self._paged_values(
            "rest/agile/1.0/board", {"projectKeyOrId": project, "maxResults": page_size}
        )

    def get_sprints(self, board_id: int | str) -> list[Record]:
        return list(self._paged_values(f"rest/agile/1.0/board/{board_id}/sprint", {}))

    def get_sprint_issues(self, sprint_id: int | str) -> list[Record]:
        return list(self._paged_values(f"rest/agile/1.0/sprint/{sprint_id}/issue", {}, key="issues"))
