"""Slack Web API client for review notifications."""

import logging
from typing import Optional

import httpx

from .errors import SlackError
from .models import ReviewContext
from .slack_messages import (
    build_ai_review_blocks,
    build_review_complete_blocks,
    build_security_alert_blocks,
)

logger = logging.getLogger(__name__)

SLACK_API_URL = "https://slack.com/api"


class SlackClient:
    """Posts review notifications to a single Slack channel."""

    def __init__(
        self,
        token: str,
        channel: str,
        base_url: str = SLACK_API_URL,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
    ):
        self.channel = channel
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            headers={"Authorization": f"Bearer {token}"},
            transport=transport,
            timeout=timeout,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _call(self, method: str, payload: Optional[dict] = None) -> dict:
        try:
            response = await self._client.post(f"/{method}", json=payload or {})
            response.raise_for_status()
            data = response.json()
        except (httpx.HTTPError, ValueError) as e:
            raise SlackError(f"Slack {method} request failed: {e}") from e

        # Slack reports API errors with HTTP 200 and ok=false
        if not data.get("ok"):
            raise SlackError(f"Slack {method} failed: {data.get('error', 'unknown_error')}")
        return data

    async def post_message(self, text: str, blocks: list[dict]) -> None:
        await self._call(
            "chat.postMessage",
            {"channel": self.channel, "text": text, "blocks": blocks, "unfurl_links": False},
        )

    async def send_alert(self, ctx: ReviewContext) -> None:
        await self.post_message("Security Alert: Secrets detected in PR", build_security_alert_blocks(ctx))

    async def send_review_complete(self, ctx: ReviewContext) -> None:
        await self.post_message("PR Review Complete: No issues found", build_review_complete_blocks(ctx))

    async def send_ai_review(self, ctx: ReviewContext, review: str) -> None:
        await self.post_message(
            f"AI Code Review for PR #{ctx.pull_request.number}", build_ai_review_blocks(ctx, review)
        )

    async def test_connection(self) -> None:
        """Check the token with auth.test."""
        data = await self._call("auth.test")
        logger.info(f"Slack connection ok (team: {data.get('team', 'unknown')})")
