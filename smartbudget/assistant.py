"""Conversational insight and auto-categorisation through an LLM.

The assistant is best-effort: every failure, including a missing API key,
degrades to a fixed fallback value instead of raising to the caller.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, Optional

import litellm

from smartbudget.config import Settings, settings as default_settings
from smartbudget.domain import CATEGORIES, FALLBACK_CATEGORY, Transaction
from smartbudget.prompts import (
    ANALYSIS_SYSTEM,
    ANALYSIS_USER,
    CATEGORIZATION_SYSTEM,
    CATEGORIZATION_USER,
    categories_list,
)

logger = logging.getLogger(__name__)

litellm.drop_params = True

NO_KEY_REPLY = "I need an API Key to function. Please configure it in the environment."
EMPTY_REPLY = "I couldn't generate a response."
ERROR_REPLY = "Sorry, I encountered an error while analyzing your budget."


class TextCompletion(ABC):
    """Port for the remote model; both operations always return a value."""

    @abstractmethod
    async def analyze(self, transactions: Iterable[Transaction], question: str) -> str:
        pass

    @abstractmethod
    async def categorize(self, description: str) -> str:
        pass


def transactions_context(transactions: Iterable[Transaction]) -> str:
    # ids are internal and never sent to the model
    rows = [
        {
            "date": t.date.isoformat(),
            "amount": float(t.amount),
            "category": t.category,
            "type": t.type,
            "description": t.description,
        }
        for t in transactions
    ]
    return json.dumps(rows, ensure_ascii=False)


def normalize_category(text: Optional[str]) -> str:
    """Map a model reply onto a known category, falling back to ``Other``."""
    if not text:
        return FALLBACK_CATEGORY
    cleaned = text.strip().strip('."\'`*').strip()
    if "|" in cleaned:
        cleaned = cleaned.split("|")[0].strip()
    for cat in CATEGORIES:
        if cat.lower() == cleaned.lower():
            return cat
    logger.warning(f"Unknown category '{text}', defaulting to '{FALLBACK_CATEGORY}'")
    return FALLBACK_CATEGORY


class LiteLLMAssistant(TextCompletion):

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self.model = self.config.ai_model

    @property
    def available(self) -> bool:
        return bool(self.config.api_key)

    async def complete(self, system_prompt: str, user_prompt: str, max_tokens: Optional[int] = None) -> str:
        kwargs: Dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "temperature": self.config.ai_temperature,
            "max_tokens": max_tokens or self.config.ai_max_tokens,
            "api_key": self.config.api_key,
        }
        try:
            response = await litellm.acompletion(**kwargs)
            return response.choices[0].message.content or ""
        except Exception as e:
            logger.error(f"AI completion error: {e}")
            raise

    async def analyze(self, transactions: Iterable[Transaction], question: str) -> str:
        if not self.available:
            logger.warning("API key is missing, assistant disabled")
            return NO_KEY_REPLY
        prompt = ANALYSIS_USER.format(transactions_json=transactions_context(transactions), question=question)
        try:
            text = await self.complete(ANALYSIS_SYSTEM, prompt)
        except Exception:
            return ERROR_REPLY
        return text.strip() or EMPTY_REPLY

    async def categorize(self, description: str) -> str:
        if not self.available or not description.strip():
            return FALLBACK_CATEGORY
        try:
            text = await self.complete(
                CATEGORIZATION_SYSTEM.format(categories=categories_list()),
                CATEGORIZATION_USER.format(description=description.strip()),
                max_tokens=20,
            )
        except Exception:
            return FALLBACK_CATEGORY
        return normalize_category(text)


_assistant: Optional[LiteLLMAssistant] = None


def get_assistant() -> LiteLLMAssistant:
    global _assistant
    if _assistant is None:
        _assistant = LiteLLMAssistant()
    return _assistant
