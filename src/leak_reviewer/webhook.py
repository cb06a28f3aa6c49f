"""Webhook authentication and event filtering."""

import hashlib
import hmac
import json
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ValidationError

from .errors import MalformedPayloadError
from .models import WebhookEvent

SIGNATURE_PREFIX = "sha256="
SIGNATURE_HEADER = "X-Hub-Signature-256"
EVENT_HEADER = "X-GitHub-Event"

PULL_REQUEST_EVENT = "pull_request"
# New PRs and new commits pushed to an existing PR
REVIEWABLE_ACTIONS = frozenset({"opened", "synchronize"})


class GateOutcome(str, Enum):
    PROCEED = "proceed"
    IGNORED = "ignored"
    UNAUTHORIZED = "unauthorized"


class GateDecision(BaseModel):
    """Result of running an inbound delivery through the gate."""

    outcome: GateOutcome
    reason: str = ""
    event: Optional[WebhookEvent] = None


def compute_signature(payload: bytes, secret: str) -> str:
    """Return the signature header value GitHub would send for this payload."""
    digest = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return f"{SIGNATURE_PREFIX}{digest}"


def verify_signature(payload: bytes, signature_header: Optional[str], secret: str) -> bool:
    """
    Verify a webhook signature header against the raw payload.

    Fails closed: a missing header, an unknown scheme prefix or an empty
    secret all count as invalid. The digest comparison is constant-time.
    """
    if not secret or not signature_header:
        return False
    if not signature_header.startswith(SIGNATURE_PREFIX):
        return False

    supplied = signature_header[len(SIGNATURE_PREFIX):]
    expected = hmac.new(secret.encode("utf-8"), payload, hashlib.sha256).hexdigest()
    return hmac.compare_digest(supplied.encode("utf-8"), expected.encode("utf-8"))


def filter_event_type(event_type: Optional[str]) -> GateOutcome:
    """Only pull request events are reviewed."""
    return GateOutcome.PROCEED if event_type == PULL_REQUEST_EVENT else GateOutcome.IGNORED


def filter_action(action: Optional[str]) -> GateOutcome:
    """Only opened and synchronize actions are reviewed."""
    return GateOutcome.PROCEED if action in REVIEWABLE_ACTIONS else GateOutcome.IGNORED


def parse_event(payload: bytes) -> WebhookEvent:
    """Decode a pull_request webhook body."""
    try:
        data = json.loads(payload)
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise MalformedPayloadError(f"Invalid JSON payload: {e}") from e
    if not isinstance(data, dict):
        raise MalformedPayloadError("Webhook payload must be a JSON object")
    try:
        return WebhookEvent.model_validate(data)
    except ValidationError as e:
        raise MalformedPayloadError(f"Unexpected payload shape: {e.error_count()} error(s)") from e


def evaluate(
    payload: bytes,
    signature_header: Optional[str],
    event_type: Optional[str],
    secret: str,
) -> GateDecision:
    """
    Run a delivery through verification and both filters.

    Raises:
        MalformedPayloadError: the signature is valid and the event type is
            reviewable, but the body cannot be parsed
    """
    if not verify_signature(payload, signature_header, secret):
        return GateDecision(outcome=GateOutcome.UNAUTHORIZED, reason="Invalid webhook signature")

    if filter_event_type(event_type) is GateOutcome.IGNORED:
        return GateDecision(outcome=GateOutcome.IGNORED, reason="Event ignored")

    event = parse_event(payload)

    if filter_action(event.action) is GateOutcome.IGNORED:
        return GateDecision(outcome=GateOutcome.IGNORED, reason="Action ignored", event=event)

    return GateDecision(outcome=GateOutcome.PROCEED, reason="Webhook received", event=event)
