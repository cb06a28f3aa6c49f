from leak_reviewer.models import Finding, ScanResult, Severity
from leak_reviewer.slack_messages import (
    MAX_BLOCKS,
    MAX_SECTION_TEXT,
    build_ai_review_blocks,
    build_review_complete_blocks,
    build_security_alert_blocks,
    split_text,
)

from conftest import make_context


def _texts(blocks: list[dict]) -> list[str]:
    return [b["text"]["text"] for b in blocks if b["type"] == "section"]


def _finding(severity: Severity, line: int) -> Finding:
    return Finding(
        pattern="AWS Access Key ID", file_path="settings.py", line_number=line, severity=severity, description="d"
    )


def test_alert_groups_by_severity_and_caps_each_group() -> None:
    findings = [_finding(Severity.CRITICAL, n) for n in range(1, 8)] + [_finding(Severity.MEDIUM, 20)]
    ctx = make_context(result=ScanResult(findings=findings, total_files=3))

    texts = _texts(build_security_alert_blocks(ctx))

    assert "*Found 8 security issue(s) across 3 file(s)*" in texts
    critical_header = next(i for i, t in enumerate(texts) if "CRITICAL Severity" in t)
    medium_header = next(i for i, t in enumerate(texts) if "MEDIUM Severity" in t)
    assert critical_header < medium_header
    assert "(7 issue(s))" in texts[critical_header]
    assert "_... and 2 more CRITICAL severity issue(s)_" in texts
    assert sum("(Line " in t for t in texts) == 6
    assert not any("HIGH Severity" in t for t in texts)


def test_alert_ends_with_pr_button() -> None:
    ctx = make_context(result=ScanResult(findings=[_finding(Severity.HIGH, 1)], total_files=1))
    blocks = build_security_alert_blocks(ctx)
    button = blocks[-1]["elements"][0]
    assert button["url"] == "https://github.com/acme/shop/pull/7"


def test_review_complete_mentions_file_count() -> None:
    texts = _texts(build_review_complete_blocks(make_context(result=ScanResult(total_files=4))))
    assert any("Scanned 4 file(s)" in t for t in texts)


def test_ai_review_is_split_into_sections() -> None:
    review = "\n".join(["line of review text"] * 400)
    blocks = build_ai_review_blocks(make_context(), review)
    texts = _texts(blocks)
    assert texts[0] == ":robot_face: *AI Code Review*"
    review_texts = texts[2:]
    assert len(review_texts) > 1
    assert all(len(t) <= MAX_SECTION_TEXT for t in review_texts)


def test_long_ai_review_stays_within_block_limit() -> None:
    review = "\n".join(["x" * 2900] * 60)
    blocks = build_ai_review_blocks(make_context(), review)
    assert len(blocks) <= MAX_BLOCKS
    assert "_... review truncated_" in _texts(blocks)
    assert blocks[-1]["type"] == "actions"


def test_short_ai_review_is_not_marked_truncated() -> None:
    blocks = build_ai_review_blocks(make_context(), "Looks fine.")
    assert "_... review truncated_" not in _texts(blocks)


def test_split_text_without_newlines() -> None:
    chunks = split_text("a" * 25, limit=10)
    assert chunks == ["a" * 10, "a" * 10, "a" * 5]
