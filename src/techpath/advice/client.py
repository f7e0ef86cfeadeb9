"""Generative career-advice client (OpenAI-compatible chat-completions gateway)."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from techpath.config import Settings, get_settings

logger = structlog.get_logger()

LEARNING_ROLES = (
    "Data Analyst",
    "UX Designer",
    "Software Engineer",
    "Product Manager",
    "DevOps Engineer",
    "QA Tester",
    "Data Scientist",
    "Business Analyst",
    "Technical Writer",
    "Technical Project Manager",
    "Technical Support Engineer",
    "Cybersecurity Analyst",
)

SKILLS_SYSTEM_PROMPT = (
    "You are a career adviser specialising in tech transitions. Analyse the user's background and "
    "explain how their skills translate to their target tech role. Be encouraging and specific.\n\n"
    "In \"recommendedPath\" recommend specific courses from the app's learning section. The roles "
    "with courses are:\n"
    + "\n".join(f"- {role}" for role in LEARNING_ROLES)
    + "\n\nYou may suggest networking, meetups, job applications or open source contributions, but "
    "never recommend external learning providers.\n\n"
    "Use British English throughout.\n\n"
    "Return a JSON object with this structure:\n"
    "{\n"
    '  "transferableSkills": ["skill - explanation"],\n'
    '  "skillGaps": ["gap - why needed"],\n'
    '  "recommendedPath": "paragraph naming courses from this app",\n'
    '  "matchScore": 75,\n'
    '  "encouragement": "personalised encouraging message"\n'
    "}"
)

BARRIERS_SYSTEM_PROMPT = (
    "You are an empathetic career advisor who supports underrepresented groups entering tech "
    "careers, including women, minorities, LGBTQ+ people, older people, disabled people and "
    "neurodivergent people.\n\n"
    "Give honest, practical advice. Acknowledge real barriers while offering concrete strategies "
    "to overcome them.\n\n"
    "Return a JSON object with this structure:\n"
    "{\n"
    '  "barriers": ["barrier they may face"],\n'
    '  "strategies": ["specific strategy with actionable steps"],\n'
    '  "resources": ["organisation, community or resource"],\n'
    '  "encouragement": "personalised message of encouragement"\n'
    "}"
)


class AdviceError(Exception):
    """Base class for advice gateway failures."""


class AdviceRateLimited(AdviceError):
    """Gateway returned 429."""


class AdviceQuotaExceeded(AdviceError):
    """Gateway returned 402 (credits depleted)."""


class AdviceUnavailable(AdviceError):
    """Gateway unreachable, misconfigured, or returned an unusable response."""


class AdviceClient:
    """Thin async client around the chat-completions gateway.

    ``transport`` lets tests substitute ``httpx.MockTransport``.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.settings = settings or get_settings()
        self.transport = transport

    async def analyze_skills(self, experience: str, skills: str, target_role: str) -> dict[str, Any]:
        user_prompt = (
            f"Current Experience: {experience}\n\n"
            f"Current Skills: {skills}\n\n"
            f"Target Role: {target_role}\n\n"
            "Analyse how this background translates to the target role. Say which existing skills are "
            "valuable and which new skills to develop, and recommend courses from this app."
        )
        return await self._complete(SKILLS_SYSTEM_PROMPT, user_prompt, operation="analyze_skills")

    async def breaking_barriers_advice(self, background: str) -> dict[str, Any]:
        user_prompt = (
            f"Background: {background}\n\n"
            "Please provide advice about:\n"
            "1. The specific barriers this person might face in entering tech\n"
            "2. Concrete strategies to overcome these barriers\n"
            "3. Communities, organisations and resources that can help\n"
            "4. An encouraging message that validates their concerns"
        )
        return await self._complete(BARRIERS_SYSTEM_PROMPT, user_prompt, operation="breaking_barriers")

    async def _complete(self, system_prompt: str, user_prompt: str, operation: str) -> dict[str, Any]:
        if not self.settings.advice_api_key:
            raise AdviceUnavailable("Advice gateway API key is not configured")

        payload = {
            "model": self.settings.advice_model,
            "messages": [
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_prompt},
            ],
            "response_format": {"type": "json_object"},
        }
        try:
            async with httpx.AsyncClient(
                transport=self.transport,
                timeout=self.settings.advice_timeout_seconds,
            ) as client:
                response = await client.post(
                    self.settings.advice_api_url,
                    headers={
                        "Authorization": f"Bearer {self.settings.advice_api_key}",
                        "Content-Type": "application/json",
                    },
                    json=payload,
                )
        except httpx.HTTPError as exc:
            logger.warning("advice_gateway_unreachable", operation=operation, error=str(exc))
            raise AdviceUnavailable("Advice gateway unreachable") from exc

        if response.status_code == 429:
            raise AdviceRateLimited("Rate limit exceeded. Please try again in a moment.")
        if response.status_code == 402:
            raise AdviceQuotaExceeded("AI credits depleted. Please add credits to continue.")
        if response.is_error:
            logger.error("advice_gateway_error", operation=operation, status=response.status_code, body=response.text[:500])
            raise AdviceUnavailable("Advice gateway error")

        try:
            content = response.json()["choices"][0]["message"]["content"]
            advice = json.loads(content)
        except (KeyError, IndexError, TypeError, ValueError) as exc:
            logger.error("advice_response_unparseable", operation=operation)
            raise AdviceUnavailable("Advice gateway returned an unusable response") from exc
        if not isinstance(advice, dict):
            raise AdviceUnavailable("Advice gateway returned an unusable response")

        logger.info("advice_generated", operation=operation)
        return advice
