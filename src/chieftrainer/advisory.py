"""Advisory text providers: study tips and answer analysis."""

from __future__ import annotations

import asyncio
import logging
from typing import Protocol

import requests

from .config import Settings
from .models import Question, Topic

logger = logging.getLogger(__name__)

FALLBACK_TIP = "Safety first. Verify your calculations manually."
FALLBACK_ANALYSIS = "Analysis offline. Review the explanation and the cited code section."

STATIC_TIPS: dict[Topic, str] = {
    Topic.P2A1: "Write the governing formula before substituting numbers, and keep units in N and mm for stress work.",
    Topic.P2A2: "Convert temperatures to kelvin before any efficiency or gas-law calculation.",
    Topic.P2A3: "Affinity laws: flow follows speed, head follows speed squared, power follows speed cubed.",
    Topic.P2B1: "Separate indicated, brake and friction power before computing any engine efficiency.",
    Topic.P2B2: "Excess air is measured against theoretical air, not against the total air supplied.",
    Topic.P2B3: "Use absolute pressures for compression ratios and sqrt(3) for three-phase line quantities.",
}


class AdvisoryProvider(Protocol):
    """Source of advisory text. Implementations must not raise."""

    async def get_tip(self, topic: Topic) -> str: ...

    async def get_analysis(
        self, question: Question, chosen_text: str, is_correct: bool, explanation: str, topic: Topic
    ) -> str: ...


class StaticAdvisor:
    """Offline advisor returning canned text."""

    async def get_tip(self, topic: Topic) -> str:
        return STATIC_TIPS.get(topic, FALLBACK_TIP)

    async def get_analysis(
        self, question: Question, chosen_text: str, is_correct: bool, explanation: str, topic: Topic
    ) -> str:
        if is_correct:
            return f"Correct: {chosen_text}. {explanation}".strip()
        return f"'{chosen_text}' is not right. {explanation}".strip()


class HttpAdvisor:
    """Advisor backed by a remote JSON endpoint.

    Requests run in a worker thread so a slow service never blocks the
    caller's event loop. Any failure returns the fixed fallback text.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 8.0,
        session: requests.Session | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Content-Type": "application/json"})
        if api_key:
            self.session.headers.update({"Authorization": f"Bearer {api_key}"})

    async def get_tip(self, topic: Topic) -> str:
        payload = {"topic": topic.name, "title": topic.title}
        return await self._fetch("tip", payload, FALLBACK_TIP)

    async def get_analysis(
        self, question: Question, chosen_text: str, is_correct: bool, explanation: str, topic: Topic
    ) -> str:
        payload = {
            "topic": topic.name,
            "questionId": question.id,
            "prompt": question.prompt,
            "chosen": chosen_text,
            "isCorrect": is_correct,
            "explanation": explanation,
        }
        return await self._fetch("analysis", payload, FALLBACK_ANALYSIS)

    async def _fetch(self, endpoint: str, payload: dict[str, object], fallback: str) -> str:
        try:
            return await asyncio.to_thread(self._post, endpoint, payload)
        except (requests.RequestException, ValueError) as exc:
            logger.warning("Advisory %s request failed: %s", endpoint, exc)
            return fallback

    def _post(self, endpoint: str, payload: dict[str, object]) -> str:
        response = self.session.post(f"{self.base_url}/{endpoint}", json=payload, timeout=self.timeout)
        response.raise_for_status()
        body = response.json()
        text = body.get("text") if isinstance(body, dict) else None
        if not isinstance(text, str) or not text.strip():
            raise ValueError(f"advisory response has no text: {body!r}")
        return text.strip()


def build_advisor(settings: Settings) -> AdvisoryProvider:
    """Return the remote advisor when configured, else the static one."""
    if settings.advisory_url:
        return HttpAdvisor(settings.advisory_url, settings.advisory_key, settings.advisory_timeout)
    return StaticAdvisor()
