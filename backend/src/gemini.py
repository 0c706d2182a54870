"""
GEMINI CLIENT
-------------
Minimal client for the Google generative-language REST API
(models/<model>:generateContent).
"""

from __future__ import annotations

import logging

import requests

log = logging.getLogger(__name__)


class GeminiError(RuntimeError):
    def __init__(self, message: str, status_code: int = 500, details: str | None = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class GeminiUnreachable(GeminiError):
    """Network level failure, no response from the API."""


class GeminiEmptyResponse(GeminiError):
    """The API answered but the reply carries no text."""


def extract_text(payload) -> str | None:
    """candidates[0].content.parts[0].text, or None if any step is missing."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError):
        return None
    return text or None


def generate_content(prompt: str, api_key: str, model: str, base_url: str, timeout: float = 30) -> str:
    url = f"{base_url.rstrip('/')}/models/{model}:generateContent"
    body = {"contents": [{"parts": [{"text": prompt}]}]}

    try:
        r = requests.post(
            url,
            params={"key": api_key},
            headers={"Content-Type": "application/json"},
            json=body,
            timeout=timeout,
        )
    except requests.RequestException as e:
        log.error("Error calling Gemini API: %s", e)
        raise GeminiUnreachable("Could not reach Gemini API.") from e

    if not r.ok:
        log.error("Gemini API error: %s - %s", r.status_code, r.text)
        raise GeminiError("Unable to get a response from Gemini API.", status_code=r.status_code, details=r.text)

    try:
        payload = r.json()
    except ValueError as e:
        raise GeminiEmptyResponse("No readable text found in AI response.") from e

    text = extract_text(payload)
    if text is None:
        log.error("AI raw response did not contain expected text: %s", payload)
        raise GeminiEmptyResponse("No readable text found in AI response.")
    return text
