"""
Product Title Translation

Translates 1688 product titles to English through an OpenAI-compatible chat
completions endpoint. A title that cannot be translated is returned as-is.
"""

import asyncio
import logging
from typing import Optional, List, Dict, Any

import httpx

from tradeon.config import settings

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "Translate the following product title to natural English for e-commerce. "
    "Return ONLY the translated title, nothing else. Keep brand names, model numbers as-is. "
    "If already English, return unchanged."
)


class TranslationUnavailable(Exception):
    """No translation backend is configured."""
    pass


class TranslationService:
    """Title translator with bounded parallelism per batch."""

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        parallelism: Optional[int] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.api_url = api_url or settings.TRANSLATION_API_URL
        self.api_key = api_key if api_key is not None else settings.TRANSLATION_API_KEY
        self.model = model or settings.TRANSLATION_MODEL
        self.parallelism = parallelism or settings.TRANSLATION_PARALLELISM
        self._transport = transport

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    async def _translate_one(self, client: httpx.AsyncClient, text: str) -> str:
        if not text or not text.strip():
            return text
        try:
            response = await client.post(
                self.api_url,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "model": self.model,
                    "messages": [
                        {"role": "system", "content": SYSTEM_PROMPT},
                        {"role": "user", "content": text},
                    ],
                    "max_tokens": 300,
                    "temperature": 0.1,
                },
            )
            if response.status_code != 200:
                return text
            data = response.json()
            result = (((data.get("choices") or [{}])[0].get("message") or {}).get("content") or "").strip()
            return result or text
        except (httpx.HTTPError, ValueError, AttributeError, IndexError) as e:
            logger.debug(f"Title translation failed, keeping original: {e}")
            return text

    async def translate_titles(self, titles: List[str]) -> List[str]:
        """Translate titles in batches of `parallelism`. Order is preserved."""
        if not self.is_configured:
            raise TranslationUnavailable("Translation API key not configured")

        results: List[str] = []
        async with httpx.AsyncClient(transport=self._transport, timeout=30.0) as client:
            for start in range(0, len(titles), self.parallelism):
                batch = titles[start:start + self.parallelism]
                results.extend(await asyncio.gather(*(self._translate_one(client, t) for t in batch)))
        return results

    async def translate_items(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """Return copies of search items with translated titles."""
        titles = [item.get("title") or "" for item in items]
        translated = await self.translate_titles(titles)
        return [{**item, "title": title} for item, title in zip(items, translated)]


_translator_instance: Optional[TranslationService] = None


def get_translation_service() -> TranslationService:
    global _translator_instance
    if _translator_instance is None:
        _translator_instance = TranslationService()
    return _translator_instance
