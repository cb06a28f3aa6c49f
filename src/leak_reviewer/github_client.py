"""GitHub REST API client for diffs and commit statuses."""

import logging
from typing import Optional

import httpx

from .errors import GitHubError
from .models import ChangedFile
from .webhook import verify_signature

logger = logging.getLogger(__name__)

PER_PAGE = 100
# GitHub rejects status descriptions longer than this
MAX_STATUS_DESCRIPTION = 140


class GitHubClient:
    """Talks to the GitHub API on behalf of the reviewer."""

    def __init__(
        self,
        token: str,
        webhook_secret: str,
        base_url: str = "https://api.github.com",
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 30.0,
    ):
        self.webhook_secret = webhook_secret
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={
                "Authorization": f"Bearer {token}",
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": "2022-11-28",
            },
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    def verify_signature(self, payload: bytes, signature_header: Optional[str]) -> bool:
        return verify_signature(payload, signature_header, self.webhook_secret)

    async def get_diff(self, owner: str, repo: str, number: int) -> list[ChangedFile]:
        """
        Fetch every changed file of a pull request, following pagination.

        Raises:
            GitHubError: if any page cannot be fetched
        """
        files: list[ChangedFile] = []
        url: Optional[str] = f"/repos/{owner}/{repo}/pulls/{number}/files"
        params: Optional[dict] = {"per_page": PER_PAGE}

        while url:
            try:
                response = await self._client.get(url, params=params)
                response.raise_for_status()
            except httpx.HTTPError as e:
                raise GitHubError(f"failed to fetch PR files: {e}") from e

            try:
                files.extend(ChangedFile.model_validate(item) for item in response.json())
            except (ValueError, TypeError) as e:
                raise GitHubError(f"unexpected PR files response: {e}") from e

            url = response.links.get("next", {}).get("url")
            # the next link already carries the query string
            params = None

        logger.debug(f"Fetched {len(files)} changed files for {owner}/{repo}#{number}")
        return files

    async def post_commit_status(
        self, owner: str, repo: str, sha: str, state: str, description: str, context: str
    ) -> None:
        """
        Attach a status to a commit.

        Raises:
            GitHubError: if GitHub rejects the request
        """
        body = {
            "state": state,
            "description": description[:MAX_STATUS_DESCRIPTION],
            "context": context,
        }
        try:
            response = await self._client.post(f"/repos/{owner}/{repo}/statuses/{sha}", json=body)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise GitHubError(f"failed to post commit status: {e}") from e
