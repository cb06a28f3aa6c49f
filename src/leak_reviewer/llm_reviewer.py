"""LLM-based code review of pull request changes."""

import asyncio
import logging
from pathlib import Path
from typing import Optional

from .errors import ReviewError
from .models import ChangedFile, ReviewContext

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).parent / "prompts"

# Per-file review limits
MAX_FILE_PATCH_LINES = 100
MAX_PROMPT_LENGTH = 10000
# Pause between per-file requests to stay inside provider quotas
REQUEST_DELAY_SECONDS = 2.0

OPENAI_MODEL = "gpt-4o-mini"
ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
GEMINI_MODEL = "gemini-2.5-flash"


def get_file_review_prompt() -> str:
    """Load the per-file review prompt template from file."""
    prompt_file = PROMPTS_DIR / "file_review.txt"
    if prompt_file.exists():
        return prompt_file.read_text()
    # Fallback prompt if file doesn't exist
    return """You are an experienced code reviewer. Review this single file change.

**File:** {filename}
**Changes:** +{additions} additions, -{deletions} deletions

**Diff:**
```diff
{patch}
```

Review for bugs, performance issues, best practices and security issues. Be concise.
"""


def truncate_diff(diff: str, max_lines: int) -> str:
    """Cut a diff down to max_lines, noting how many lines were dropped."""
    lines = diff.split("\n")
    if len(lines) <= max_lines:
        return diff
    return "\n".join(lines[:max_lines]) + f"\n... (truncated {len(lines) - max_lines} more lines)"


def truncate_chars(text: str, max_chars: int) -> str:
    """Cut text down to max_chars, noting how many characters were dropped."""
    if len(text) <= max_chars:
        return text
    dropped = len(text) - max_chars
    return text[:max_chars] + f"\n... (truncated {dropped} more characters)"


# Room left for the character truncation note
_NOTE_RESERVE = 64


def build_file_prompt(changed: ChangedFile) -> str:
    """
    Build the review prompt for one file.

    The patch is cut to MAX_FILE_PATCH_LINES lines and then to whatever
    length keeps the whole prompt within MAX_PROMPT_LENGTH characters.
    """
    template = get_file_review_prompt()
    fields = {
        "filename": changed.filename,
        "additions": changed.additions,
        "deletions": changed.deletions,
    }
    frame_length = len(template.format(patch="", **fields))
    budget = max(0, MAX_PROMPT_LENGTH - frame_length - _NOTE_RESERVE)

    patch = truncate_chars(truncate_diff(changed.patch, MAX_FILE_PATCH_LINES), budget)
    return template.format(patch=patch, **fields)[:MAX_PROMPT_LENGTH]


def detect_provider(
    openai_api_key: Optional[str] = None,
    anthropic_api_key: Optional[str] = None,
    gemini_api_key: Optional[str] = None,
) -> tuple[str | None, str | None]:
    """
    Pick an LLM provider from the configured keys.

    Returns:
        Tuple of (provider_name, api_key) or (None, None) if no provider available.
    """
    # Check providers in order: OpenAI, Anthropic, Gemini
    if openai_api_key:
        return ("openai", openai_api_key)
    if anthropic_api_key:
        return ("anthropic", anthropic_api_key)
    if gemini_api_key:
        return ("gemini", gemini_api_key)
    return (None, None)


async def _complete_with_openai(prompt: str, api_key: str) -> str:
    from openai import AsyncOpenAI

    client = AsyncOpenAI(api_key=api_key)
    response = await client.chat.completions.create(
        model=OPENAI_MODEL,
        messages=[
            {"role": "system", "content": "You are an experienced code reviewer."},
            {"role": "user", "content": prompt},
        ],
        temperature=0.2,
    )
    return response.choices[0].message.content or ""


async def _complete_with_anthropic(prompt: str, api_key: str) -> str:
    from anthropic import AsyncAnthropic

    client = AsyncAnthropic(api_key=api_key)
    response = await client.messages.create(
        model=ANTHROPIC_MODEL,
        max_tokens=2048,
        messages=[{"role": "user", "content": prompt}],
        temperature=0.2,
    )
    return response.content[0].text if response.content else ""


async def _complete_with_gemini(prompt: str, api_key: str) -> str:
    from google import genai
    from google.genai import types

    client = genai.Client(api_key=api_key)
    response = await client.aio.models.generate_content(
        model=GEMINI_MODEL,
        contents=prompt,
        config=types.GenerateContentConfig(temperature=0.2),
    )
    return response.text or ""


PROVIDERS = {
    "openai": _complete_with_openai,
    "anthropic": _complete_with_anthropic,
    "gemini": _complete_with_gemini,
}


class LLMReviewer:
    """Reviews each changed file with an LLM and joins the results."""

    def __init__(
        self,
        openai_api_key: Optional[str] = None,
        anthropic_api_key: Optional[str] = None,
        gemini_api_key: Optional[str] = None,
        request_delay: float = REQUEST_DELAY_SECONDS,
    ):
        self.provider, self._api_key = detect_provider(openai_api_key, anthropic_api_key, gemini_api_key)
        self.request_delay = request_delay

    async def complete(self, prompt: str) -> str:
        """Send one prompt to the configured provider."""
        if not self.provider or not self._api_key:
            raise ReviewError("No LLM provider configured")
        logger.debug(f"Prompt size: {len(prompt)} characters")
        try:
            return await PROVIDERS[self.provider](prompt, self._api_key)
        except Exception as e:
            raise ReviewError(f"{self.provider} request failed: {e}") from e

    async def test_connection(self) -> None:
        text = await self.complete("Say hello in one word")
        if not text.strip():
            raise ReviewError("empty response from API")

    async def review_file(self, changed: ChangedFile) -> str:
        return await self.complete(build_file_prompt(changed))

    async def request_review(self, ctx: ReviewContext) -> str:
        """
        Review every file that has a patch and combine the reviews.

        A file whose request fails is noted in the output and the remaining
        files are still reviewed.

        Raises:
            ReviewError: if no file could be reviewed
        """
        if not self.provider:
            raise ReviewError("No LLM provider configured")

        pr = ctx.pull_request
        sections = [f"**PR Review for #{pr.number}: {pr.title}**\n\n"]
        reviewable = [f for f in ctx.files if f.patch]
        reviewed = 0
        failed = 0

        for i, changed in enumerate(reviewable):
            logger.info(f"Reviewing file {i + 1}/{len(reviewable)}: {changed.filename}")
            try:
                review = await self.review_file(changed)
            except ReviewError as e:
                logger.warning(f"Failed to review {changed.filename}: {e}")
                sections.append(f"\n### {changed.filename}\n_Could not review this file due to API error_\n\n")
                failed += 1
            else:
                sections.append(f"\n### {changed.filename}\n{review}\n\n")
                reviewed += 1

            if i < len(reviewable) - 1 and self.request_delay > 0:
                await asyncio.sleep(self.request_delay)

        if reviewed == 0:
            raise ReviewError(f"failed to review any files ({failed} failed)")

        sections.append("\n---\n")
        sections.append(f"**Summary:** Reviewed {reviewed}/{len(ctx.files)} file(s) successfully\n")
        return "".join(sections)
