"""
Optional transcript polishing via a chat-completion API.

Raw speech-to-text output is full of filler words and missing punctuation.
When an OpenAI API key and an instruction template are both configured,
:class:`TranscriptPolisher` sends the template as the system message and the
transcript as the user message, and returns the model's answer.

Polishing never fails the pipeline.  Without configuration the text is
returned unchanged; on any transport error, error status or malformed
response the upstream error is logged and the original text is returned.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .config import Settings
from .errors import UpstreamAPIError

logger = logging.getLogger(__name__)

CHAT_COMPLETIONS_URL = "https://api.openai.com/v1/chat/completions"
POLISH_MODEL = "gpt-4o-mini"


def build_chat_payload(system_prompt: str, transcript: str) -> dict:
    return {
        "model": POLISH_MODEL,
        "messages": [
            {"role": "system", "content": system_prompt},
            {"role": "user", "content": transcript},
        ],
    }


def extract_content(body: Any) -> str:
    """Return ``choices[0].message.content`` from a completion response.

    Raises:
        UpstreamAPIError: If the body does not have that shape.
    """
    try:
        content = body["choices"][0]["message"]["content"]
    except (KeyError, IndexError, TypeError) as exc:
        raise UpstreamAPIError("openai", _error_message(body)) from exc
    if not isinstance(content, str):
        raise UpstreamAPIError("openai", "response content is not text")
    return content


def _error_message(body: Any) -> str:
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return "Unknown error"


class TranscriptPolisher:
    def __init__(self, api_key: str = "", system_prompt: Optional[str] = None) -> None:
        self.api_key = api_key
        self.system_prompt = system_prompt

    @classmethod
    def from_settings(cls, settings: Settings) -> "TranscriptPolisher":
        return cls(api_key=settings.openai_api_key, system_prompt=settings.polish_prompt)

    @property
    def enabled(self) -> bool:
        return bool(self.api_key) and bool(self.system_prompt)

    def request_polish(self, text: str) -> str:
        """Call the completion API once.

        Raises:
            UpstreamAPIError: On transport errors, error responses or an
                unusable body.
        """
        try:
            response = requests.post(
                CHAT_COMPLETIONS_URL,
                headers={
                    "Authorization": f"Bearer {self.api_key}",
                    "Content-Type": "application/json",
                },
                json=build_chat_payload(self.system_prompt or "", text),
            )
        except requests.RequestException as exc:
            raise UpstreamAPIError("openai", str(exc)) from exc

        try:
            body = response.json()
        except ValueError:
            body = None
        if not response.ok:
            raise UpstreamAPIError("openai", _error_message(body), status_code=response.status_code)
        return extract_content(body)

    def polish(self, text: str) -> str:
        """Return a polished version of ``text``, or ``text`` itself on any problem."""
        if not self.enabled:
            logger.info("Polishing not configured; using raw transcript")
            return text

        logger.info("Polishing transcript with %s...", POLISH_MODEL)
        try:
            polished = self.request_polish(text)
        except UpstreamAPIError as exc:
            logger.error("Failed to polish transcript: %s", exc.message)
            logger.warning("Using unpolished transcript")
            return text
        return polished
