"""Capabilities the review pipeline consumes from external services."""

from typing import Optional, Protocol

from .models import ChangedFile, ReviewContext


class GitHost(Protocol):
    def verify_signature(self, payload: bytes, signature_header: Optional[str]) -> bool: ...

    async def get_diff(self, owner: str, repo: str, number: int) -> list[ChangedFile]: ...

    async def post_commit_status(
        self, owner: str, repo: str, sha: str, state: str, description: str, context: str
    ) -> None: ...


class Notifier(Protocol):
    async def send_alert(self, ctx: ReviewContext) -> None: ...

    async def send_review_complete(self, ctx: ReviewContext) -> None: ...

    async def send_ai_review(self, ctx: ReviewContext, review: str) -> None: ...

    async def test_connection(self) -> None: ...


class Reviewer(Protocol):
    async def request_review(self, ctx: ReviewContext) -> str: ...

    async def test_connection(self) -> None: ...
