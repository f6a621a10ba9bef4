import json
import random
import re

import pytest

from papertrail.config.models import Config, GenerationConfig, ModelConfig
from papertrail.core.analysis import analyze
from papertrail.core.generator import ADJECTIVES, MessageGenerator, generate_stub, parse_reply
from papertrail.utils.errors import (
    EmptyResponseError,
    GenerationError,
    InputError,
    MalformedResponseError,
    ProviderError,
)

TRAILING_ADJECTIVE = re.compile(r"\[(\w+)\]$")


@pytest.fixture
def analysis():
    files = [{"filename": "foo.js", "status": "added", "additions": 5, "deletions": 0}]
    return analyze(files, {"parents": []})


@pytest.fixture
def live_config():
    return Config(model=ModelConfig(provider="claude", api_key="test-key"))


@pytest.fixture
def provider(mocker):
    provider = mocker.MagicMock()
    provider.generate = mocker.AsyncMock()
    provider.aclose = mocker.AsyncMock()
    return provider


@pytest.mark.asyncio
async def test_stub_generation(analysis):
    config = Config(generation=GenerationConfig(stub=True))
    generator = MessageGenerator(config, rng=random.Random(7))

    result = await generator.generate(analysis)

    assert "Modified files: foo.js" in result.message
    assert "Changes include 5 additions and 0 deletions." in result.message
    match = TRAILING_ADJECTIVE.search(result.message)
    assert match and match.group(1) in ADJECTIVES
    assert result.summary == "Updated 1 files with 5 additions."


def test_stub_without_files():
    result = generate_stub(analyze([], None))
    assert result.message.startswith("Modified files: no files. Changes include 0 additions")
    assert result.summary == "Updated 0 files with 0 additions."


def test_stub_is_always_well_formed(analysis):
    rng = random.Random(0)
    seen = set()
    for _ in range(50):
        result = generate_stub(analysis, rng)
        seen.add(TRAILING_ADJECTIVE.search(result.message).group(1))
        assert "1" in result.summary
    assert seen <= set(ADJECTIVES)


@pytest.mark.asyncio
async def test_stub_never_calls_provider(analysis, provider):
    config = Config(generation=GenerationConfig(stub=True))
    await MessageGenerator(config, provider=provider).generate(analysis)
    provider.generate.assert_not_called()


@pytest.mark.asyncio
async def test_live_generation(analysis, live_config, provider):
    provider.generate.return_value = json.dumps({
        "message": "Introduces foo.js with the initial request handler. [Bold]",
        "summary": "Adds the request handler module.",
    })

    result = await MessageGenerator(live_config, provider=provider).generate(analysis)

    assert result.message.endswith("[Bold]")
    assert result.summary == "Adds the request handler module."
    provider.generate.assert_awaited_once()
    prompt = provider.generate.call_args[0][0]
    assert '"filename": "foo.js"' in prompt
    assert '"fixed"' in prompt
    assert '{"message": "...", "summary": "..."}' in prompt


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", [
    "Sure! Here is your commit message.",
    '{"message": "Only a message."}',
    '{"message": "", "summary": "x"}',
    '["message", "summary"]',
])
async def test_malformed_reply(analysis, live_config, provider, reply):
    provider.generate.return_value = reply

    with pytest.raises(GenerationError, match="^LLM generation failed:") as exc_info:
        await MessageGenerator(live_config, provider=provider).generate(analysis)

    assert isinstance(exc_info.value.__cause__, MalformedResponseError)


@pytest.mark.asyncio
@pytest.mark.parametrize("reply", ["", "   ", None])
async def test_empty_reply(analysis, live_config, provider, reply):
    provider.generate.return_value = reply

    with pytest.raises(GenerationError, match="^LLM generation failed: No response") as exc_info:
        await MessageGenerator(live_config, provider=provider).generate(analysis)

    assert isinstance(exc_info.value.__cause__, EmptyResponseError)


@pytest.mark.asyncio
async def test_provider_error_is_wrapped_without_retry(analysis, live_config, provider):
    provider.generate.side_effect = ProviderError("Anthropic API error (529): Overloaded")

    with pytest.raises(GenerationError, match=r"^LLM generation failed: Anthropic API error \(529\)") as exc_info:
        await MessageGenerator(live_config, provider=provider).generate(analysis)

    assert isinstance(exc_info.value.__cause__, ProviderError)
    assert provider.generate.await_count == 1


@pytest.mark.asyncio
async def test_missing_credential(analysis, monkeypatch):
    monkeypatch.delenv("ANTHROPIC_API_KEY", raising=False)
    config = Config(model=ModelConfig(provider="claude", api_key=None))

    with pytest.raises(GenerationError, match="Anthropic API key not found") as exc_info:
        await MessageGenerator(config).generate(analysis)

    assert isinstance(exc_info.value.__cause__, InputError)


@pytest.mark.asyncio
async def test_created_provider_is_closed(analysis, live_config, provider, mocker):
    provider.generate.return_value = '{"message": "m. [Clear]", "summary": "s."}'
    mocker.patch("papertrail.core.generator.get_provider", return_value=provider)

    await MessageGenerator(live_config).generate(analysis)

    provider.aclose.assert_awaited_once()


def test_parse_reply_strips_whitespace():
    result = parse_reply('\n  {"message": " m ", "summary": "s", "extra": 1}\n')
    assert result.message == "m"
    assert result.summary == "s"
