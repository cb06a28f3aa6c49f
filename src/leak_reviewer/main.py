"""FastAPI application receiving GitHub webhooks."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import BackgroundTasks, FastAPI, Request
from fastapi.responses import PlainTextResponse

from .config import Settings
from .errors import MalformedPayloadError
from .github_client import GitHubClient
from .interfaces import Notifier, Reviewer
from .llm_reviewer import LLMReviewer
from .models import WebhookEvent
from .orchestrator import ReviewOrchestrator
from .slack_client import SlackClient
from .webhook import EVENT_HEADER, SIGNATURE_HEADER, GateOutcome, evaluate

logger = logging.getLogger(__name__)


def configure_logging(level: str = "info") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


async def run_review(orchestrator: ReviewOrchestrator, event: WebhookEvent) -> None:
    """Run one review, logging anything the pipeline did not handle."""
    try:
        await orchestrator.process(event)
    except Exception:
        logger.exception(f"Review of PR #{event.pull_request.number} failed")


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[ReviewOrchestrator] = None,
    notifier: Optional[Notifier] = None,
    reviewer: Optional[Reviewer] = None,
) -> FastAPI:
    """
    Build the webhook application.

    Collaborators that are not passed in are built from settings and closed
    on shutdown.
    """
    settings = settings or Settings()
    configure_logging(settings.log_level)
    owned = []

    if notifier is None:
        notifier = SlackClient(settings.slack_token, settings.slack_channel)
        owned.append(notifier)
    if reviewer is None:
        if not settings.has_ai_provider:
            logger.warning(
                "No OPENAI_API_KEY, ANTHROPIC_API_KEY or GEMINI_API_KEY set. "
                "AI code review will be disabled."
            )
        reviewer = LLMReviewer(
            openai_api_key=settings.openai_api_key,
            anthropic_api_key=settings.anthropic_api_key,
            gemini_api_key=settings.gemini_api_key,
        )
    if orchestrator is None:
        git_host = GitHubClient(settings.github_token, settings.webhook_secret, base_url=settings.github_api_url)
        owned.append(git_host)
        orchestrator = ReviewOrchestrator(
            git_host, notifier, reviewer, status_context=settings.status_context
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info(f"Starting leak-reviewer in {settings.environment} mode")
        yield
        for client in owned:
            await client.aclose()

    app = FastAPI(
        title="Leak Reviewer",
        description="Scans pull requests for leaked secrets and posts AI code reviews",
        version="0.1.0",
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health():
        """Health check endpoint."""
        return {"status": "ok"}

    @app.post("/webhook")
    async def webhook(request: Request, background_tasks: BackgroundTasks):
        """
        Receive a GitHub webhook delivery.

        The review runs after the response has been sent.
        """
        body = await request.body()
        event_type = request.headers.get(EVENT_HEADER)
        logger.info(f"Received GitHub event: {event_type}")

        try:
            decision = evaluate(body, request.headers.get(SIGNATURE_HEADER), event_type, settings.webhook_secret)
        except MalformedPayloadError as e:
            logger.warning(f"Rejected malformed webhook payload: {e}")
            return PlainTextResponse("Bad request", status_code=400)

        if decision.outcome is GateOutcome.UNAUTHORIZED:
            logger.warning("Invalid webhook signature")
            return PlainTextResponse("Unauthorized", status_code=401)

        if decision.outcome is GateOutcome.IGNORED:
            action = decision.event.action if decision.event else None
            logger.info(f"{decision.reason} (event={event_type}, action={action})")
            return PlainTextResponse(decision.reason)

        background_tasks.add_task(run_review, orchestrator, decision.event)
        return PlainTextResponse(decision.reason)

    @app.get("/test-slack")
    async def test_slack():
        """Check the Slack connection."""
        try:
            await notifier.test_connection()
        except Exception as e:
            logger.error(f"Slack connection failed: {e}")
            return PlainTextResponse(f"Slack connection failed: {e}", status_code=500)
        return PlainTextResponse("Slack connection successful")

    @app.get("/test-ai")
    async def test_ai():
        """Check the AI review provider."""
        try:
            await reviewer.test_connection()
        except Exception as e:
            logger.error(f"AI connection failed: {e}")
            return PlainTextResponse(f"AI connection failed: {e}", status_code=500)
        return PlainTextResponse("AI connection successful")

    return app
