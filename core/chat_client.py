"""Chat-completion fallback for utterances no matcher claims.

The client keeps a short rolling history so follow-up questions read
naturally to the model, while intent classification itself stays
turn-by-turn.
"""

from __future__ import annotations

import logging
from collections import deque
from typing import Deque, Dict, List, Optional

from openai import OpenAI

from core.errors import IntegrationFailure

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Bạn là trợ lý ảo nói tiếng Việt. Trả lời ngắn gọn, thân thiện, "
    "và dùng cùng ngôn ngữ với người dùng."
)


class ChatClient:
    """Sends free-form questions to an OpenAI chat model."""

    def __init__(
        self,
        model: str,
        api_key: str | None,
        *,
        max_turns: int = 10,
        temperature: float = 1.0,
        client: Optional[OpenAI] = None,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._temperature = temperature
        self._client = client
        self._history: Deque[Dict[str, str]] = deque(maxlen=max(1, max_turns) * 2)

    def send_message(self, text: str) -> str:
        """Return the model's reply or raise ``IntegrationFailure``."""
        messages: List[Dict[str, str]] = [{"role": "system", "content": SYSTEM_PROMPT}]
        messages.extend(self._history)
        messages.append({"role": "user", "content": text})

        client = self._get_client()
        try:
            response = client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=self._temperature,
            )
        except Exception as exc:  # network/credentials issues
            logger.warning("Chat completion failed: %s", exc)
            raise IntegrationFailure("Chat completion failed", detail=str(exc)) from exc

        content = getattr(response.choices[0].message, "content", None) if response.choices else None
        if not content or not content.strip():
            raise IntegrationFailure("Chat completion returned an empty response")

        reply = content.strip()
        self._history.append({"role": "user", "content": text})
        self._history.append({"role": "assistant", "content": reply})
        return reply

    def reset(self) -> None:
        self._history.clear()

    def _get_client(self) -> OpenAI:
        if self._client is not None:
            return self._client
        if not self._api_key:
            raise IntegrationFailure("Chat completion is not configured (missing OPENAI_API_KEY)")
        self._client = OpenAI(api_key=self._api_key)
        return self._client


__all__ = ["ChatClient", "SYSTEM_PROMPT"]
