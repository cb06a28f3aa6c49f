"""Slack Block Kit message builders."""

from .models import Finding, ReviewContext, Severity
from .scanner import get_recommendation
from .severity import classify

# Issues listed per severity before the rest are summarised
MAX_ISSUES_PER_SEVERITY = 5
# Slack limit for the text of a section block
MAX_SECTION_TEXT = 3000
# Slack limit for the number of blocks in one message
MAX_BLOCKS = 50

SEVERITY_EMOJI = {
    Severity.CRITICAL: "\U0001F534",
    Severity.HIGH: "\U0001F7E0",
    Severity.MEDIUM: "\U0001F7E1",
    Severity.LOW: "\U0001F7E2",
}


def _section(text: str) -> dict:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _divider() -> dict:
    return {"type": "divider"}


def _pr_info(ctx: ReviewContext) -> dict:
    pr = ctx.pull_request
    return _section(
        f"*Repository:* {ctx.repository.full_name}\n"
        f"*PR #{pr.number}:* <{pr.html_url}|{pr.title}>\n"
        f"*Author:* {pr.user.login}"
    )


def _view_pr_button(ctx: ReviewContext) -> dict:
    return {
        "type": "actions",
        "block_id": "pr_actions",
        "elements": [
            {
                "type": "button",
                "action_id": "view_pr",
                "value": "view_pr",
                "text": {"type": "plain_text", "text": "View Pull Request"},
                "url": ctx.pull_request.html_url,
            }
        ],
    }


def _issue_section(severity: Severity, issues: list[Finding]) -> list[dict]:
    blocks = [
        _section(f"{SEVERITY_EMOJI[severity]} *{severity.value} Severity* ({len(issues)} issue(s))")
    ]
    for issue in issues[:MAX_ISSUES_PER_SEVERITY]:
        blocks.append(
            _section(
                f"• *{issue.pattern}*\n"
                f"  `{issue.file_path}` (Line {issue.line_number})\n"
                f"  _{issue.description}_"
            )
        )
    remaining = len(issues) - MAX_ISSUES_PER_SEVERITY
    if remaining > 0:
        blocks.append(_section(f"_... and {remaining} more {severity.value} severity issue(s)_"))
    return blocks


def build_security_alert_blocks(ctx: ReviewContext) -> list[dict]:
    """Blocks for a pull request with detected secrets."""
    result = ctx.scan_result
    breakdown = classify(result)

    blocks = [
        _section(":rotating_light: *Security Alert: Secrets Detected* :rotating_light:"),
        _pr_info(ctx),
        _divider(),
        _section(f"*Found {len(result.findings)} security issue(s) across {result.total_files} file(s)*"),
    ]
    for severity, issues in breakdown.non_empty():
        blocks.extend(_issue_section(severity, issues))

    most_severe = breakdown.non_empty()[0][0] if result.found else Severity.LOW
    blocks.extend(
        [
            _divider(),
            _section(
                "*:warning: Action Required:* Please remove these secrets before merging!\n"
                f"_{get_recommendation(most_severe)}_"
            ),
            _view_pr_button(ctx),
        ]
    )
    return blocks


def split_text(text: str, limit: int = MAX_SECTION_TEXT) -> list[str]:
    """Split text into chunks no longer than limit, preferring line breaks."""
    chunks: list[str] = []
    remaining = text
    while len(remaining) > limit:
        cut = remaining.rfind("\n", 0, limit)
        if cut <= 0:
            cut = limit
        chunks.append(remaining[:cut])
        remaining = remaining[cut:].lstrip("\n")
    if remaining:
        chunks.append(remaining)
    return chunks


def build_ai_review_blocks(ctx: ReviewContext, review: str) -> list[dict]:
    """Blocks carrying an AI code review."""
    blocks = [
        _section(":robot_face: *AI Code Review*"),
        _pr_info(ctx),
        _divider(),
    ]
    # two closing blocks and one truncation notice must still fit
    room = MAX_BLOCKS - len(blocks) - 3
    chunks = split_text(review)
    blocks.extend(_section(chunk) for chunk in chunks[:room])
    if len(chunks) > room:
        blocks.append(_section("_... review truncated_"))
    blocks.extend([_divider(), _view_pr_button(ctx)])
    return blocks


def build_review_complete_blocks(ctx: ReviewContext) -> list[dict]:
    """Blocks for a clean scan when no AI review is available."""
    return [
        _section(":white_check_mark: *PR Review Complete*"),
        _pr_info(ctx),
        _divider(),
        _section(
            "*No security issues found!*\n"
            f"Scanned {ctx.scan_result.total_files} file(s) - all clear! :sparkles:"
        ),
        _view_pr_button(ctx),
    ]
