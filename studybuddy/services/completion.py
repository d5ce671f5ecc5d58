"""
studybuddy/services/completion.py

Narrow text-completion contract used by the study plan generator, plus the
Groq-backed implementation built from settings.
"""

from __future__ import annotations

import logging
from typing import Optional, Protocol

import groq

from studybuddy.core.config import Settings, settings
from studybuddy.core.errors import UpstreamError

log = logging.getLogger(__name__)


class CompletionClient(Protocol):
    def complete(self, system: str, prompt: str) -> str:
        """Return the raw model text, or raise UpstreamError."""
        ...


class GroqCompletionClient:
    def __init__(
        self,
        api_key: str,
        *,
        model: str,
        temperature: float = 0.2,
        max_tokens: int = 2000,
        timeout: float = 60.0,
    ):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self._client = groq.Groq(api_key=api_key, timeout=timeout)
        log.info("[LLM] Groq client initialized (model=%s).", model)

    def complete(self, system: str, prompt: str) -> str:
        log.debug("[LLM] requesting completion (model=%s, prompt_chars=%d)", self.model, len(prompt))
        try:
            resp = self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
            )
        except groq.APITimeoutError as e:
            log.error("[LLM] completion timed out: %s", e)
            raise UpstreamError("The AI service timed out. Please try again later.") from e
        except groq.GroqError as e:
            log.error("[LLM] chat failed: %s", e, exc_info=True)
            raise UpstreamError() from e

        if not resp.choices:
            raise UpstreamError("The AI service returned no choices.")
        return (resp.choices[0].message.content or "").strip()


def build_completion_client(cfg: Settings = settings) -> Optional[CompletionClient]:
    """Return a configured client, or None when no API key is present."""
    if not cfg.HAS_GROQ:
        log.info("[LLM] GROQ_API_KEY not set; study plan generation disabled.")
        return None
    return GroqCompletionClient(
        cfg.GROQ_API_KEY.strip(),
        model=cfg.GROQ_MODEL,
        temperature=cfg.LLM_TEMPERATURE,
        max_tokens=cfg.LLM_MAX_TOKENS,
        timeout=cfg.LLM_TIMEOUT_SECONDS,
    )
