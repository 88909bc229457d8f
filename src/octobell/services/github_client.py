"""Async GitHub REST client for hook management."""

import logging
from typing import Any

import httpx
from pydantic import BaseModel, Field, ValidationError

from ..config import settings
from ..schemas.subscriptions import MAX_ID

logger = logging.getLogger(__name__)


class GitHubAPIError(Exception):
    """A GitHub REST call failed. The message is shown to the user as-is."""

    def __init__(self, message: str, status_code: int | None = None):
        self.status_code = status_code
        super().__init__(message)


class RepositoryOwner(BaseModel):
    login: str


class RepositoryMetadata(BaseModel):
    """Subset of GET /repos/{owner}/{repo} this service needs."""

    id: int = Field(ge=0, le=MAX_ID)
    name: str
    url: str
    html_url: str | None = None
    owner: RepositoryOwner


class GitHubClient:
    """Async GitHub API client authenticated with a user-supplied API key."""

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.base_url = base_url or settings.github_api_url
        self.timeout = timeout if timeout is not None else settings.github_timeout_seconds
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "GitHubClient":
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={
                "Authorization": f"Bearer {self.api_key}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
                "User-Agent": "octobell",
            },
            timeout=self.timeout,
            transport=self._transport,
        )
        return self

    async def __aexit__(self, *args: Any) -> None:
        if self._client:
            await self._client.aclose()

    async def create_hook(self, owner: str, repo: str, callback_url: str) -> int:
        """Create a hook delivering issues and pull_request events. Returns its id."""
        logger.info(f"Creating webhook on {owner}/{repo} pointing at {callback_url}")
        response = await self._request(
            "POST",
            f"/repos/{owner}/{repo}/hooks",
            json={
                "name": "web",
                "active": True,
                "events": ["issues", "pull_request"],
                "config": {
                    "url": callback_url,
                    "content_type": "json",
                    "insecure_ssl": "0",
                },
            },
        )
        match response.status_code:
            case 201:
                return int(response.json()["id"])
            case 422:
                raise GitHubAPIError(
                    "Validation failed, or the endpoint has been spammed.", 422
                )
            case _:
                raise self._server_error(response)

    async def remove_hook(self, owner: str, repo: str, hook_id: int) -> None:
        """Delete a hook previously created by `create_hook`."""
        logger.info(f"Removing webhook {hook_id} from {owner}/{repo}")
        response = await self._request("DELETE", f"/repos/{owner}/{repo}/hooks/{hook_id}")
        if response.status_code != 204:
            raise self._server_error(response)

    async def fetch_repository(self, owner: str, repo: str) -> RepositoryMetadata:
        """Get repository metadata (id, name, urls, owner)."""
        response = await self._request("GET", f"/repos/{owner}/{repo}")
        if response.status_code != 200:
            raise self._server_error(response)
        try:
            return RepositoryMetadata.model_validate(response.json())
        except (ValidationError, ValueError) as e:
            raise GitHubAPIError(f"Unexpected repository payload for {owner}/{repo}") from e

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        assert self._client is not None
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as e:
            raise GitHubAPIError(f"GitHub did not answer within {self.timeout:g}s") from e
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"Could not reach GitHub: {e}") from e

    @staticmethod
    def _server_error(response: httpx.Response) -> GitHubAPIError:
        detail = ""
        try:
            payload = response.json()
        except ValueError:
            payload = None
        if isinstance(payload, dict):
            detail = payload.get("message", "")
        message = f"Server error: {response.status_code} {response.reason_phrase}"
        if detail:
            message = f"{message} ({detail})"
        return GitHubAPIError(message, response.status_code)
