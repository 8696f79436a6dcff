"""
engage.services.assistant_service — OpenAI Relay
=================================================

Forwards a member's free text, together with their current balance, to
an OpenAI chat model and returns the model's answer unchanged.

The relay never raises.  A missing API key, a timeout, an API or
network error, or an empty/malformed response all log locally and
return :data:`FALLBACK_TEXT` so the cog always has something to send.
"""

from __future__ import annotations

import asyncio
import logging
import os

from openai import AsyncOpenAI

from engage.config import DEFAULT_ASSISTANT_MODEL
from engage.constants import ASSISTANT_SYSTEM_PROMPT, FALLBACK_TEXT

logger = logging.getLogger(__name__)


def build_user_prompt(display_name: str | None, points: int, text: str) -> str:
    return f"{display_name or 'unknown'} has {points} points. Message: {text}"


class AssistantRelay:
    """Thin wrapper around ``AsyncOpenAI.chat.completions``.

    Parameters
    ----------
    client:
        An ``AsyncOpenAI`` instance.  When omitted one is built from
        ``OPENAI_API_KEY``; without a key every call falls back.
    model:
        Chat model name.
    timeout:
        Seconds before a call is abandoned.
    """

    def __init__(
        self,
        client: AsyncOpenAI | None = None,
        *,
        model: str = DEFAULT_ASSISTANT_MODEL,
        timeout: float = 30.0,
    ) -> None:
        if client is None:
            api_key = os.getenv("OPENAI_API_KEY")
            if api_key:
                client = AsyncOpenAI(api_key=api_key)
            else:
                logger.warning("OPENAI_API_KEY is not set; assistant replies will use the fallback text.")
        self.client = client
        self.model = model
        self.timeout = timeout

    async def reply(self, display_name: str | None, points: int, text: str) -> str:
        """Return the model's answer to *text*, or the fallback message."""
        if self.client is None:
            return FALLBACK_TEXT

        try:
            response = await asyncio.wait_for(
                self.client.chat.completions.create(
                    model=self.model,
                    messages=[
                        {"role": "system", "content": ASSISTANT_SYSTEM_PROMPT},
                        {"role": "user", "content": build_user_prompt(display_name, points, text)},
                    ],
                ),
                timeout=self.timeout,
            )
        except TimeoutError:
            logger.warning("Assistant call timed out after %.1fs", self.timeout)
            return FALLBACK_TEXT
        except Exception:
            logger.exception("Assistant call failed")
            return FALLBACK_TEXT

        try:
            content = response.choices[0].message.content
        except (AttributeError, IndexError, TypeError):
            logger.exception("Malformed assistant response")
            return FALLBACK_TEXT

        if not content or not content.strip():
            logger.warning("Assistant returned an empty response")
            return FALLBACK_TEXT
        return content

    async def close(self) -> None:
        if self.client is not None:
            await self.client.close()
