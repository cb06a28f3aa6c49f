"""Review pipeline run for every accepted pull request event."""

import logging
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel

from .interfaces import GitHost, Notifier, Reviewer
from .models import ReviewContext, ScanResult, WebhookEvent
from .scanner import SecretScanner
from .severity import classify

logger = logging.getLogger(__name__)

DEFAULT_STATUS_CONTEXT = "leak-reviewer/security-scan"

STATE_PENDING = "pending"
STATE_SUCCESS = "success"
STATE_FAILURE = "failure"
STATE_ERROR = "error"

PENDING_DESCRIPTION = "Scanning for secrets..."
FETCH_FAILED_DESCRIPTION = "Failed to fetch PR diff"


class RunOutcome(str, Enum):
    COMPLETED = "completed"
    FETCH_FAILED = "fetch_failed"


class StatusDecision(BaseModel):
    """Final commit status for a scan."""

    state: str
    description: str

    @property
    def blocking(self) -> bool:
        return self.state == STATE_FAILURE


def decide_commit_status(result: ScanResult) -> StatusDecision:
    """
    Turn a scan result into the final commit status.

    Any CRITICAL finding blocks the merge. Other findings pass with a warning,
    and a clean scan passes with an all-clear message.
    """
    breakdown = classify(result)
    if breakdown.has_blocking_severity:
        return StatusDecision(
            state=STATE_FAILURE,
            description=f"Found {breakdown.critical_count} critical secret(s) - merge blocked",
        )
    if result.found:
        return StatusDecision(
            state=STATE_SUCCESS,
            description=f"Warning: found {len(result.findings)} non-critical issue(s) - review recommended",
        )
    return StatusDecision(state=STATE_SUCCESS, description="No secrets detected - safe to merge")


class ReviewOrchestrator:
    """Runs the scan, status and notification steps for one pull request.

    Only a failed diff fetch ends a run early. Every later step is isolated:
    its failure is logged and the remaining steps still run.
    """

    def __init__(
        self,
        git_host: GitHost,
        notifier: Notifier,
        reviewer: Reviewer,
        scanner: Optional[SecretScanner] = None,
        status_context: str = DEFAULT_STATUS_CONTEXT,
    ):
        self.git_host = git_host
        self.notifier = notifier
        self.reviewer = reviewer
        self.scanner = scanner or SecretScanner()
        self.status_context = status_context

    async def _post_status(self, owner: str, repo: str, sha: str, state: str, description: str) -> bool:
        try:
            await self.git_host.post_commit_status(owner, repo, sha, state, description, self.status_context)
        except Exception as e:
            logger.error(f"Error posting {state} status to {owner}/{repo}@{sha[:8]}: {e}")
            return False
        return True

    async def process(self, event: WebhookEvent) -> RunOutcome:
        owner = event.repository.owner.login
        repo = event.repository.name
        number = event.pull_request.number
        sha = event.pull_request.head.sha

        logger.info(f"Processing PR #{number} from {owner}/{repo}")

        await self._post_status(owner, repo, sha, STATE_PENDING, PENDING_DESCRIPTION)

        try:
            files = await self.git_host.get_diff(owner, repo, number)
        except Exception as e:
            logger.error(f"Error fetching diff for PR #{number} in {owner}/{repo}: {e}")
            await self._post_status(owner, repo, sha, STATE_ERROR, FETCH_FAILED_DESCRIPTION)
            return RunOutcome.FETCH_FAILED

        logger.info(f"Fetched {len(files)} files from PR #{number}")

        result = self.scanner.scan_files(files)
        result = result.model_copy(update={"scanned_at": datetime.now(timezone.utc)})
        logger.info(f"Scan complete: found {len(result.findings)} issues")

        ctx = ReviewContext(
            repository=event.repository,
            pull_request=event.pull_request,
            files=files,
            scan_result=result,
        )

        decision = decide_commit_status(result)
        logger.info(f"Posting {decision.state} status: {decision.description}")
        await self._post_status(owner, repo, sha, decision.state, decision.description)

        if result.found:
            logger.info("Sending security alert")
            try:
                await self.notifier.send_alert(ctx)
            except Exception as e:
                logger.error(f"Error sending security alert for PR #{number}: {e}")

        await self._review(ctx)

        logger.info(f"Completed processing PR #{number}")
        return RunOutcome.COMPLETED

    async def _review(self, ctx: ReviewContext) -> None:
        number = ctx.pull_request.number
        logger.info(f"Requesting AI code review for {len(ctx.files)} files")
        try:
            review = await self.reviewer.request_review(ctx)
        except Exception as e:
            logger.warning(f"AI review failed for PR #{number}: {e}")
            # an alert already went out when secrets were found
            if not ctx.scan_result.found:
                try:
                    await self.notifier.send_review_complete(ctx)
                except Exception as send_error:
                    logger.error(f"Error sending review complete message for PR #{number}: {send_error}")
            return

        logger.info("AI review received, sending notification")
        try:
            await self.notifier.send_ai_review(ctx, review)
        except Exception as e:
            logger.error(f"Error sending AI review for PR #{number}: {e}")
