"""
AI task suggestions from a free-text goal.

Suggestions are never persisted here; the client saves the ones it wants
through the task repository.
"""

import logging

import requests

from .config import GEMINI_API_KEY, GEMINI_FALLBACK_MODELS, GEMINI_MODEL, GEMINI_TIMEOUT
from .errors import SuggestionsNotConfigured, SuggestionUnavailable

logger = logging.getLogger(__name__)

GEMINI_URL = "https://generativelanguage.googleapis.com/v1beta/models/{model}:generateContent"

MAX_COUNT = 50


def build_prompt(topic, count=None):
    if count:
        amount = f"a list of {count}"
    else:
        amount = "as many"
    return (
        f"If no actionable tasks can be generated for the goal '{topic}', or it is not a goal "
        f"at all, reply with only the word false. Otherwise generate {amount} concise, "
        f"actionable tasks to achieve this goal: {topic}. Return each task on its own line, "
        "with no numbering and no formatting. Each line must be a single actionable task."
    )


def parse_reply(text):
    """Split the model reply into task lines; False when the goal was rejected."""
    if text.strip().lower() == "false":
        return False
    return [line.strip() for line in text.splitlines() if line.strip()]


class GeminiTaskGenerator:
    """Calls the Gemini REST API, falling back through ``models`` in order."""

    def __init__(self, api_key=GEMINI_API_KEY, models=None, timeout=GEMINI_TIMEOUT):
        self.api_key = api_key
        if models is None:
            models = [m for m in (GEMINI_MODEL,) + GEMINI_FALLBACK_MODELS if m]
        self.models = list(dict.fromkeys(models))
        self.timeout = timeout

    def generate(self, topic, count=None):
        """Return ``(tasks, model)``; ``tasks`` is False when the topic is not a goal."""
        if not self.api_key:
            raise SuggestionsNotConfigured()

        body = {"contents": [{"parts": [{"text": build_prompt(topic, count)}]}]}
        attempts = []
        for model in self.models:
            try:
                resp = requests.post(
                    GEMINI_URL.format(model=model),
                    params={"key": self.api_key},
                    json=body,
                    timeout=self.timeout,
                )
            except requests.RequestException as exc:
                logger.warning("Gemini request failed model=%s: %s", model, exc)
                attempts.append({"model": model, "error": str(exc)})
                continue
            if not resp.ok:
                logger.warning("Gemini returned %s model=%s", resp.status_code, model)
                attempts.append({"model": model, "status": resp.status_code})
                continue
            try:
                data = resp.json()
                text = data["candidates"][0]["content"]["parts"][0]["text"]
            except (ValueError, KeyError, IndexError, TypeError):
                logger.warning("Unexpected Gemini payload model=%s", model)
                attempts.append({"model": model, "error": "unexpected payload"})
                continue
            return parse_reply(text or ""), model

        logger.error("All suggestion models failed: %s", attempts)
        raise SuggestionUnavailable(attempts)
