"""Authenticated Jira Cloud REST client.

See https://developer.atlassian.com/cloud/jira/platform/rest/v3/intro/.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from typing import Any, TypeVar

import httpx

from jirabridge.auth.credentials import CredentialManager
from jirabridge.client._rate_limit_transport import RateLimitTransport
from jirabridge.client.mapper import (
    flatten_project_statuses,
    issue_from_payload,
    project_from_payload,
    transition_from_payload,
)
from jirabridge.constants import API_URL, DEFAULT_SEARCH_FIELDS, MAX_SEARCH_PAGE_SIZE
from jirabridge.contracts.exceptions import NotConnectedError, RemoteApiError
from jirabridge.contracts.issue import Issue, Project, RemoteStatus, SearchPage, Transition
from jirabridge.utils import quote_jql

logger = logging.getLogger(__name__)

PageCallback = Callable[[int, int], None]

_T = TypeVar("_T")

_MALFORMED_PAYLOAD = (KeyError, TypeError, AttributeError, ValueError)


def create_http_client(*, transport: httpx.AsyncBaseTransport | None = None) -> httpx.AsyncClient:
    """Build the shared HTTP client used for OAuth and REST calls."""
    inner = transport or httpx.AsyncHTTPTransport(
        limits=httpx.Limits(max_connections=20, max_keepalive_connections=10),
    )
    return httpx.AsyncClient(
        transport=RateLimitTransport(transport=inner),
        timeout=httpx.Timeout(30.0),
    )


def _malformed(response: httpx.Response) -> RemoteApiError:
    logger.error("Malformed Jira response (%s): %.200s", response.status_code, response.text)
    return RemoteApiError(response.status_code, response.text, message="Malformed Jira response")


def _project_page(data: Any) -> tuple[list[Project], bool]:
    data = data or {}
    values = data.get("values") or []
    return [project_from_payload(value) for value in values], bool(data.get("isLast", True))


def _transitions(data: Any) -> list[Transition]:
    return [transition_from_payload(raw) for raw in (data or {}).get("transitions") or []]


class TrackerClient:
    """Single gateway for authenticated Jira REST calls.

    Every call goes through :meth:`request`, which resolves a bearer token via
    the :class:`CredentialManager` (refreshing it when needed) and turns any
    non-2xx response into :class:`RemoteApiError`. Errors are not retried.
    """

    def __init__(self, credentials: CredentialManager, http_client: httpx.AsyncClient) -> None:
        self._credentials = credentials
        self._http = http_client

    async def request(
        self,
        endpoint: str,
        *,
        method: str = "GET",
        json: Any = None,
        params: dict[str, Any] | None = None,
        parse: Callable[[Any], _T] | None = None,
    ) -> Any:
        """Call *endpoint* and return the decoded body, or ``parse(body)`` when given.

        A 2xx response whose body is not JSON, or that *parse* cannot map, is
        reported as :class:`RemoteApiError` like any other bad response.
        """
        connection = await self._credentials.get_connection()
        if connection is None:
            raise NotConnectedError("Not connected to Jira")

        access_token = await self._credentials.get_access_token()
        url = f"{API_URL}/ex/jira/{connection.cloud_id}{endpoint}"
        logger.debug("Jira API: %s %s", method, endpoint)

        response = await self._http.request(
            method,
            url,
            json=json,
            params=params,
            headers={"Authorization": f"Bearer {access_token}", "Accept": "application/json"},
        )
        if not response.is_success:
            logger.error("Jira API error: %s - %s", response.status_code, response.text)
            raise RemoteApiError(
                response.status_code,
                response.text,
                message=f"Jira API error: {response.status_code} - {response.reason_phrase}",
            )
        data = None
        if response.content:
            try:
                data = response.json()
            except ValueError as exc:
                raise _malformed(response) from exc
        if parse is None:
            return data
        try:
            return parse(data)
        except _MALFORMED_PAYLOAD as exc:
            raise _malformed(response) from exc

    # ------------------------------------------------------------------
    # Projects
    # ------------------------------------------------------------------

    async def list_projects(self) -> list[Project]:
        projects: list[Project] = []
        start_at = 0
        while True:
            page, is_last = await self.request(
                "/rest/api/3/project/search",
                params={"startAt": start_at, "maxResults": MAX_SEARCH_PAGE_SIZE},
                parse=_project_page,
            )
            projects.extend(page)
            if not page or is_last:
                return projects
            start_at += len(page)

    async def list_project_statuses(self, project_key: str) -> list[RemoteStatus]:
        return await self.request(f"/rest/api/3/project/{project_key}/statuses", parse=flatten_project_statuses)

    # ------------------------------------------------------------------
    # Issues
    # ------------------------------------------------------------------

    async def search_issues(
        self,
        jql: str,
        *,
        start_at: int = 0,
        max_results: int = 50,
        fields: Sequence[str] = DEFAULT_SEARCH_FIELDS,
    ) -> SearchPage:
        def parse(data: Any) -> SearchPage:
            data = data or {}
            issues = [issue_from_payload(raw) for raw in data.get("issues") or []]
            return SearchPage(
                total=data.get("total", len(issues)),
                start_at=data.get("startAt", start_at),
                max_results=data.get("maxResults", max_results),
                issues=issues,
            )

        return await self.request(
            "/rest/api/3/search",
            method="POST",
            json={"jql": jql, "startAt": start_at, "maxResults": max_results, "fields": list(fields)},
            parse=parse,
        )

    async def list_all_project_issues(
        self,
        project_key: str,
        extra_filter: str = "",
        *,
        page_size: int = MAX_SEARCH_PAGE_SIZE,
        on_page: PageCallback | None = None,
    ) -> list[Issue]:
        """Fetch every issue of *project_key*, newest first, one page at a time.

        Pages are trusted as returned; no client-side deduplication happens.
        """
        jql = f"project = {quote_jql(project_key)}"
        if extra_filter.strip():
            jql += f" AND ({extra_filter.strip()})"
        jql += " ORDER BY created DESC"
        logger.info("Fetching issues with JQL: %s", jql)

        issues: list[Issue] = []
        start_at = 0
        while True:
            page = await self.search_issues(jql, start_at=start_at, max_results=page_size)
            issues.extend(page.issues)
            logger.info("Fetched %d/%d issues", len(issues), page.total)
            if on_page is not None:
                on_page(len(issues), page.total)
            if not page.issues or start_at + len(page.issues) >= page.total:
                return issues
            start_at += page_size

    async def get_issue(self, issue_key: str) -> Issue:
        return await self.request(f"/rest/api/3/issue/{issue_key}", parse=issue_from_payload)

    # ------------------------------------------------------------------
    # Workflow
    # ------------------------------------------------------------------

    async def list_transitions(self, issue_key: str) -> list[Transition]:
        return await self.request(f"/rest/api/3/issue/{issue_key}/transitions", parse=_transitions)

    async def apply_transition(self, issue_key: str, transition_id: str) -> None:
        await self.request(
            f"/rest/api/3/issue/{issue_key}/transitions",
            method="POST",
            json={"transition": {"id": transition_id}},
        )
        logger.info("Transitioned issue %s", issue_key)
