from __future__ import annotations

import logging
import re
from typing import Optional, Protocol

import requests
from openai import OpenAI

from backoffice.config import Settings
from backoffice.errors import TranslationError

logger = logging.getLogger(__name__)

_THINK_RE = re.compile(r"<think>.*?</think>", flags=re.DOTALL)
_PLACEHOLDER_RE = re.compile(r"\{[^{}]+\}")


class Translator(Protocol):
    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        ...

    def close(self) -> None:
        ...


class GoogleTranslator:
    """Client for the public ``translate_a/single`` endpoint."""

    def __init__(
        self,
        url: str = "https://translate.googleapis.com/translate_a/single",
        timeout: float = 10.0,
        session: Optional[requests.Session] = None,
    ):
        self.url = url
        self.timeout = timeout
        self.session = session or requests.Session()

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if not text:
            return text
        params = {
            "client": "gtx",
            "sl": source_lang,
            "tl": target_lang,
            "dt": "t",
            "q": text,
        }
        try:
            response = self.session.get(self.url, params=params, timeout=self.timeout)
            response.raise_for_status()
            data = response.json()
        except (requests.RequestException, ValueError) as exc:
            raise TranslationError(
                f"Translation {source_lang}->{target_lang} failed: {exc}"
            ) from exc
        # [[["translated", "original", ...], ...], ...]
        try:
            segments = [segment[0] for segment in data[0] if segment and segment[0]]
        except (IndexError, KeyError, TypeError) as exc:
            raise TranslationError(
                f"Unexpected translation response for {source_lang}->{target_lang}"
            ) from exc
        if not segments:
            raise TranslationError(
                f"Empty translation response for {source_lang}->{target_lang}"
            )
        return "".join(segments)

    def close(self) -> None:
        self.session.close()


class AITranslator:
    def __init__(self, base_url: str, api_key: str, model: str, timeout: float = 30.0, client=None):
        self.client = client or OpenAI(base_url=base_url, api_key=api_key, timeout=timeout)
        self.model = model

    def translate(self, text: str, source_lang: str, target_lang: str) -> str:
        if not text:
            return text
        # Curly-brace placeholders must come back unchanged
        sys = (
            "You are a precise translator for an art marketplace. Translate user text "
            "from the source language into the target language. Strict rules: "
            "1) Keep placeholders like {name} exactly unchanged. "
            "2) Keep line breaks and markup. 3) Return only the translated text without quotes."
        )
        placeholders = sorted(set(_PLACEHOLDER_RE.findall(text)))
        extra = f"Placeholders to preserve: {', '.join(placeholders)}. " if placeholders else ""
        prompt = (
            f"Source language: {source_lang}. Target language: {target_lang}. {extra}"
            f"Text to translate:\n{text}"
        )
        try:
            resp = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": sys},
                    {"role": "user", "content": prompt},
                ],
                temperature=0.2,
            )
            out = resp.choices[0].message.content or ""
        except Exception as exc:
            raise TranslationError(
                f"AI translation {source_lang}->{target_lang} failed: {exc}"
            ) from exc
        cleaned = _THINK_RE.sub("", out).strip()
        if not cleaned:
            raise TranslationError(
                f"AI translation {source_lang}->{target_lang} returned no text"
            )
        return cleaned

    def close(self) -> None:
        self.client.close()


def build_translator(settings: Settings) -> Translator | None:
    provider = settings.translation_provider
    if provider == "google":
        return GoogleTranslator(
            url=settings.google_translate_url,
            timeout=settings.translation_timeout_seconds,
        )
    if provider == "ai":
        if not (settings.ai_api_key and settings.ai_model):
            logger.warning("AI translation selected but BACKEND_AI_API_KEY/BACKEND_AI_MODEL are not set")
            return None
        return AITranslator(
            base_url=settings.ai_base_url or "https://api.fireworks.ai/inference/v1",
            api_key=settings.ai_api_key,
            model=settings.ai_model,
            timeout=settings.translation_timeout_seconds,
        )
    if provider != "none":
        logger.warning("Unknown translation provider %r; machine translation disabled", provider)
    return None
