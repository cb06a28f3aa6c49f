import pytest

from leak_reviewer import llm_reviewer
from leak_reviewer.errors import ReviewError
from leak_reviewer.llm_reviewer import (
    MAX_PROMPT_LENGTH,
    LLMReviewer,
    build_file_prompt,
    detect_provider,
    truncate_diff,
)
from leak_reviewer.models import ChangedFile

from conftest import make_context


def _changed(name: str, lines: int = 3) -> ChangedFile:
    patch = "\n".join(f"+line {n}" for n in range(lines))
    return ChangedFile(filename=name, additions=lines, changes=lines, patch=patch)


def test_detect_provider_order() -> None:
    assert detect_provider("o", "a", "g") == ("openai", "o")
    assert detect_provider(None, "a", "g") == ("anthropic", "a")
    assert detect_provider(None, None, "g") == ("gemini", "g")
    assert detect_provider() == (None, None)


def test_truncate_diff() -> None:
    diff = "\n".join(str(n) for n in range(10))
    assert truncate_diff(diff, 20) == diff
    truncated = truncate_diff(diff, 4)
    assert truncated.split("\n")[:4] == ["0", "1", "2", "3"]
    assert truncated.endswith("... (truncated 6 more lines)")


def test_file_prompt_caps_patch_lines() -> None:
    prompt = build_file_prompt(_changed("big.py", lines=250))
    assert "**File:** big.py" in prompt
    assert "+line 99" in prompt
    assert "+line 100" not in prompt
    assert "truncated 150 more lines" in prompt


def test_file_prompt_caps_total_length_for_long_lines() -> None:
    changed = ChangedFile(filename="bundle.min.js", additions=1, changes=1, patch="+" + "x" * 500_000)

    prompt = build_file_prompt(changed)

    assert len(prompt) <= MAX_PROMPT_LENGTH
    assert "**File:** bundle.min.js" in prompt
    assert "more characters)" in prompt
    assert prompt.rstrip().endswith("**Your review:**")


@pytest.mark.asyncio
async def test_request_review_sends_bounded_prompts(monkeypatch) -> None:
    sizes = []

    async def fake_gemini(prompt: str, api_key: str) -> str:
        sizes.append(len(prompt))
        return "Minified bundle."

    monkeypatch.setitem(llm_reviewer.PROVIDERS, "gemini", fake_gemini)
    reviewer = LLMReviewer(gemini_api_key="g", request_delay=0)
    changed = ChangedFile(filename="bundle.min.js", additions=1, changes=1, patch="+" + "x" * 500_000)

    await reviewer.request_review(make_context(files=[changed]))

    assert sizes and all(size <= MAX_PROMPT_LENGTH for size in sizes)


@pytest.mark.asyncio
async def test_request_review_combines_per_file_reviews(monkeypatch) -> None:
    prompts = []

    async def fake_gemini(prompt: str, api_key: str) -> str:
        prompts.append(prompt)
        if "broken.py" in prompt:
            raise RuntimeError("503")
        return "Fine."

    monkeypatch.setitem(llm_reviewer.PROVIDERS, "gemini", fake_gemini)
    reviewer = LLMReviewer(gemini_api_key="g", request_delay=0)
    files = [_changed("a.py"), ChangedFile(filename="logo.png"), _changed("broken.py")]

    review = await reviewer.request_review(make_context(files=files))

    assert len(prompts) == 2
    assert "### a.py\nFine." in review
    assert "### broken.py\n_Could not review this file due to API error_" in review
    assert "Reviewed 1/3 file(s) successfully" in review


@pytest.mark.asyncio
async def test_request_review_waits_between_files(monkeypatch) -> None:
    sleeps = []

    async def fake_sleep(seconds: float) -> None:
        sleeps.append(seconds)

    async def fake_openai(prompt: str, api_key: str) -> str:
        return "ok"

    monkeypatch.setattr(llm_reviewer.asyncio, "sleep", fake_sleep)
    monkeypatch.setitem(llm_reviewer.PROVIDERS, "openai", fake_openai)
    reviewer = LLMReviewer(openai_api_key="o")

    await reviewer.request_review(make_context(files=[_changed("a.py"), _changed("b.py"), _changed("c.py")]))

    assert sleeps == [llm_reviewer.REQUEST_DELAY_SECONDS] * 2


@pytest.mark.asyncio
async def test_request_review_fails_when_nothing_reviewed(monkeypatch) -> None:
    async def failing(prompt: str, api_key: str) -> str:
        raise RuntimeError("quota")

    monkeypatch.setitem(llm_reviewer.PROVIDERS, "anthropic", failing)
    reviewer = LLMReviewer(anthropic_api_key="a", request_delay=0)

    with pytest.raises(ReviewError):
        await reviewer.request_review(make_context(files=[_changed("a.py")]))


@pytest.mark.asyncio
async def test_no_provider_configured() -> None:
    reviewer = LLMReviewer()
    with pytest.raises(ReviewError):
        await reviewer.request_review(make_context(files=[_changed("a.py")]))
    with pytest.raises(ReviewError):
        await reviewer.test_connection()
