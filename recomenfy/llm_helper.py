# recomenfy/llm_helper.py
# ---------------------------------------------------------------------------
# Concept gateways: OpenAI chat completions, plus a local rule-based gateway
# used when no OPENAI_API_KEY is configured (offline/dev runs).
# Provider failures are NOT replaced by the local gateway; they propagate.
# ---------------------------------------------------------------------------

from __future__ import annotations

import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from recomenfy import config
from recomenfy.concept import (
    SYSTEM_PROMPT,
    build_keyword_prompt,
    build_profile_prompt,
    parse_concept,
)
from recomenfy.schemas import PlaylistConcept, TasteProfile

log = logging.getLogger("recomenfy.llm")


class OpenAIConceptGateway:
    def __init__(self, client: Optional[Any] = None, model: Optional[str] = None):
        if client is None:
            if not config.OPENAI_API_KEY:
                raise RuntimeError("OPENAI_API_KEY is not defined in environment variables")
            client = AsyncOpenAI(api_key=config.OPENAI_API_KEY)
        self._client = client
        self.model = model or config.OPENAI_MODEL

    async def _complete(self, prompt: str) -> str:
        log.info("[llm] Sending prompt to %s", self.model)
        res = await self._client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=0.7,
            max_tokens=400,
        )
        text = (res.choices[0].message.content or "").strip()
        log.debug("[llm] Raw response: %s", text)
        return text

    async def generate_concept(self, profile: TasteProfile) -> PlaylistConcept:
        return parse_concept(await self._complete(build_profile_prompt(profile)))

    async def generate_concept_from_keywords(self, keywords: str, profile: TasteProfile) -> PlaylistConcept:
        return parse_concept(await self._complete(build_keyword_prompt(keywords, profile)))


class LocalConceptGateway:
    """Rule-based concepts from the profile alone. No network."""

    async def generate_concept(self, profile: TasteProfile) -> PlaylistConcept:
        if profile.energy_avg > 0.6:
            return PlaylistConcept(
                name="High Voltage Vibes",
                description="Keep the energy flowing with these upbeat tracks.",
                target_energy_range=(0.7, 0.95),
                target_valence_range=(0.5, 0.9),
                preferred_genres=["dance pop", "house", "rock"],
                novelty=0.2,
            )
        if profile.valence_avg < 0.4:
            return PlaylistConcept(
                name="Melancholy Moments",
                description="Introspective tunes for valid feelings.",
                target_energy_range=(0.2, 0.5),
                target_valence_range=(0.1, 0.4),
                preferred_genres=["indie folk", "sad lo-fi"],
                novelty=0.5,
            )
        return PlaylistConcept(
            name="Chill Discovery",
            description="Relax and find something new.",
            target_energy_range=(0.3, 0.6),
            target_valence_range=(0.4, 0.7),
            preferred_genres=["lo-fi", "indie pop"],
            novelty=0.7,
        )

    async def generate_concept_from_keywords(self, keywords: str, profile: TasteProfile) -> PlaylistConcept:
        base = await self.generate_concept(profile)
        theme = " ".join(w.capitalize() for w in keywords.split()) or base.name
        return base.model_copy(update={
            "name": theme,
            "description": f"A {profile.mood_tendency} mix built around {keywords.strip()}.",
            "preferred_genres": profile.top_genres[:3] or base.preferred_genres,
        })


def get_concept_gateway() -> Any:
    if config.OPENAI_API_KEY:
        return OpenAIConceptGateway()
    log.warning("[llm] OPENAI_API_KEY not set; using local rule-based concepts.")
    return LocalConceptGateway()
