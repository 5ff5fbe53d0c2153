import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from article_generator import ScriptGenerator, ScriptRequest, safe_title
from config import Settings
from exceptions import RetryBudgetExhaustedError
from key_pool import KeyPool
from key_rotation import KeyRotator
from newsroom_rules import (
    BLANK_LINE_FILLER,
    DEFAULT_TITLE,
    SYSTEM_PROMPT_FORMAT,
    SYSTEM_PROMPT_REPORT,
    SYSTEM_PROMPT_REWRITE,
    NewsFormat,
)


def run(coro):
    return asyncio.run(coro)


def _response(text):
    resp = MagicMock()
    resp.choices = [MagicMock()]
    resp.choices[0].message.content = text
    return resp


async def _no_sleep(seconds):
    return None


def make_generator(*replies, keys=("k1", "k2")):
    """Generator whose clients all share one mocked chat.completions.create."""
    create = AsyncMock(side_effect=list(replies))
    clients = {}

    def factory(key):
        client = MagicMock()
        client.chat.completions.create = create
        clients[key] = client
        return client

    rotator = KeyRotator(KeyPool(list(keys)), factory, sleep=_no_sleep)
    return ScriptGenerator(rotator, Settings(api_keys=list(keys))), create, clients


def _messages(create, call=0):
    return create.call_args_list[call].kwargs["messages"]


def test_safe_title():
    assert safe_title(None) == DEFAULT_TITLE
    assert safe_title("   ") == DEFAULT_TITLE
    assert safe_title(" Flood ") == "Flood"


def test_generate_report_uses_report_prompts():
    generator, create, _ = make_generator(_response("# અહેવાલ\nબોડી"))
    content = run(generator.generate_report("Flood", "Weather", "Surat", "heavy rain"))

    assert content == "# અહેવાલ\nબોડી"
    messages = _messages(create)
    assert messages[0] == {"role": "system", "content": SYSTEM_PROMPT_REPORT}
    assert "Title: Flood" in messages[1]["content"]
    kwargs = create.call_args.kwargs
    assert kwargs["model"] == "gemini-1.5-flash"
    assert kwargs["max_tokens"] == 2048


def test_rewrite_article():
    generator, create, _ = make_generator(_response("# નવું"))
    assert run(generator.rewrite_article("# જૂનું", "make it shorter")) == "# નવું"
    messages = _messages(create)
    assert messages[0]["content"] == SYSTEM_PROMPT_REWRITE
    assert "# જૂનું" in messages[1]["content"]


def test_generate_script_format_prompt_and_av_filler():
    generator, create, _ = make_generator(_response("# T\n1)\n2) line"))
    content = run(generator.generate_script(ScriptRequest(title="T", format=NewsFormat.AV)))

    assert content == f"# T\n1){BLANK_LINE_FILLER}\n2) line"
    messages = _messages(create)
    assert messages[0]["content"] == SYSTEM_PROMPT_FORMAT
    assert "## Anchor Script" in messages[1]["content"]


def test_generate_script_only_fills_av():
    generator, create, _ = make_generator(_response("1)\n2)"))
    content = run(generator.generate_script(ScriptRequest(title="T", format=NewsFormat.EXPRESS)))
    assert content == "1)\n2)"


def test_generate_script_rewrite_flow():
    generator, create, _ = make_generator(_response("revised"))
    request = ScriptRequest(title="T", format=NewsFormat.PKG, base_content="draft body")
    assert request.is_rewrite
    assert run(generator.generate_script(request)) == "revised"

    messages = _messages(create)
    assert messages[0]["content"] == SYSTEM_PROMPT_REWRITE
    assert "draft body" in messages[1]["content"]


def test_none_content_becomes_empty_string():
    generator, create, _ = make_generator(_response(None))
    assert run(generator.generate_report("T")) == ""


def test_rate_limited_call_rotates_key():
    generator, create, clients = make_generator(
        Exception("429 Too Many Requests"),
        _response("ok"),
    )
    assert run(generator.generate_report("T")) == "ok"
    assert set(clients) == {"k1", "k2"}
    assert generator.rotator.current_key == "k2"


def test_persistent_rate_limit_surfaces_budget_error():
    generator, create, _ = make_generator(
        *[Exception("quota_exceeded")] * 3,
        keys=("k1", "k2", "k3"),
    )
    with pytest.raises(RetryBudgetExhaustedError):
        run(generator.generate_report("T"))
    assert create.await_count == 3
