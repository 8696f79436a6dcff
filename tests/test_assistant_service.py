"""
tests/test_assistant_service.py — Assistant Relay Tests
========================================================

The OpenAI client is replaced by mocks; no network.
"""

from __future__ import annotations

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

from conftest import run_async

from engage.constants import ASSISTANT_SYSTEM_PROMPT, FALLBACK_TEXT
from engage.services.assistant_service import AssistantRelay, build_user_prompt


def _client(create: AsyncMock) -> MagicMock:
    client = MagicMock()
    client.chat.completions.create = create
    client.close = AsyncMock()
    return client


def _response(content):
    return SimpleNamespace(choices=[SimpleNamespace(message=SimpleNamespace(content=content))])


class TestReply:
    def test_relays_model_text_verbatim(self):
        create = AsyncMock(return_value=_response("Try liking a few links!"))
        relay = AssistantRelay(_client(create), model="gpt-test")

        answer = run_async(relay.reply("ada", 1200, "how do I earn?"))

        assert answer == "Try liking a few links!"
        kwargs = create.await_args.kwargs
        assert kwargs["model"] == "gpt-test"
        assert kwargs["messages"][0] == {"role": "system", "content": ASSISTANT_SYSTEM_PROMPT}
        assert kwargs["messages"][1]["content"] == "ada has 1200 points. Message: how do I earn?"

    def test_api_error_falls_back(self, caplog):
        create = AsyncMock(side_effect=RuntimeError("boom"))
        relay = AssistantRelay(_client(create))

        assert run_async(relay.reply("ada", 0, "hi")) == FALLBACK_TEXT
        assert "Assistant call failed" in caplog.text

    def test_timeout_falls_back(self):
        async def slow(**kwargs):
            await asyncio.sleep(5)

        relay = AssistantRelay(_client(AsyncMock(side_effect=slow)), timeout=0.01)

        assert run_async(relay.reply("ada", 0, "hi")) == FALLBACK_TEXT

    def test_empty_content_falls_back(self):
        relay = AssistantRelay(_client(AsyncMock(return_value=_response(""))))
        assert run_async(relay.reply("ada", 0, "hi")) == FALLBACK_TEXT

    def test_malformed_response_falls_back(self):
        relay = AssistantRelay(_client(AsyncMock(return_value=SimpleNamespace(choices=[]))))
        assert run_async(relay.reply("ada", 0, "hi")) == FALLBACK_TEXT

    def test_without_api_key_everything_falls_back(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        relay = AssistantRelay()
        assert relay.client is None
        assert run_async(relay.reply("ada", 0, "hi")) == FALLBACK_TEXT
        run_async(relay.close())


class TestPrompt:
    def test_unknown_name(self):
        assert build_user_prompt(None, -100, "hey") == "unknown has -100 points. Message: hey"
