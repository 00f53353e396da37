# recomenfy/concept.py
# ---------------------------------------------------------------------------
# Prompt construction and response validation for playlist concepts.
# The generation itself is delegated to a ConceptGateway (see llm_helper.py).
# ---------------------------------------------------------------------------
from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from pydantic import ValidationError

from recomenfy.errors import (
    ConceptGenerationFailed,
    InvalidConceptFormatError,
    MalformedConceptError,
)
from recomenfy.gateways import ConceptGateway
from recomenfy.schemas import PlaylistConcept, TasteProfile

log = logging.getLogger("recomenfy.concept")

SYSTEM_PROMPT = "You are an expert music curator."

RESPONSE_FORMAT = """{
  "playlist_name": "string",
  "description": "string",
  "target_energy": [0.0, 1.0],
  "target_valence": [0.0, 1.0],
  "preferred_genres": ["string"],
  "novelty": 0.0,
  "avoid_artists": ["string"]
}"""

_RULES = (
    "- Do NOT mention specific songs\n"
    "- Do NOT mention albums\n"
    "- Do NOT include links\n"
    "- Answer ONLY with a single raw JSON object (no markdown, no ```json fences)\n"
    "- Follow the format below exactly\n"
    "- energy, valence and novelty values must be between 0.0 and 1.0\n"
)

_REQUIRED = {
    "name": ("playlist_name", "name"),
    "target_energy_range": ("target_energy", "target_energy_range", "targetEnergyRange"),
    "target_valence_range": ("target_valence", "target_valence_range", "targetValenceRange"),
}

_FENCE_RE = re.compile(r"```(?:json|JSON)?")


def _profile_json(profile: TasteProfile) -> str:
    return json.dumps(profile.model_dump(), indent=2, ensure_ascii=False)


def build_profile_prompt(profile: TasteProfile) -> str:
    return (
        "Based on the listener's music profile below, create the CONCEPT of a "
        "personalised playlist.\n\n"
        "RULES:\n"
        f"{_RULES}\n"
        "Music profile:\n"
        f"{_profile_json(profile)}\n\n"
        "Required response format:\n"
        f"{RESPONSE_FORMAT}\n"
    )


def build_keyword_prompt(keywords: str, profile: TasteProfile) -> str:
    keywords = (keywords or "").strip()
    return (
        f'The user wants a playlist based on these keywords: "{keywords}"\n\n'
        "Also take the user's music profile into account to personalise it "
        "(the keywords come first):\n"
        f"{_profile_json(profile)}\n\n"
        "RULES:\n"
        "- Create a creative name and description that reflect the keywords\n"
        "- Use the keywords to define the style of the playlist\n"
        f"{_RULES}\n"
        "Required response format:\n"
        f"{RESPONSE_FORMAT}\n"
    )


def strip_code_fences(text: str) -> str:
    return _FENCE_RE.sub("", text or "").strip()


def parse_concept(text: str) -> PlaylistConcept:
    """Parse the provider's raw text into a PlaylistConcept.

    Raises InvalidConceptFormatError when the text is not a JSON object and
    MalformedConceptError when required fields are missing or out of range.
    """
    clean = strip_code_fences(text)
    try:
        data: Any = json.loads(clean)
    except (json.JSONDecodeError, TypeError) as e:
        log.warning("[concept] Unparseable provider response: %r", (text or "")[:500])
        raise InvalidConceptFormatError("Invalid JSON response from AI") from e
    if not isinstance(data, dict):
        raise InvalidConceptFormatError("AI response is not a JSON object")

    missing = [
        field for field, keys in _REQUIRED.items()
        if not any(data.get(k) not in (None, "", []) for k in keys)
    ]
    if missing:
        raise MalformedConceptError(f"Missing required fields in AI response: {', '.join(missing)}")

    try:
        return PlaylistConcept.model_validate(data)
    except ValidationError as e:
        raise MalformedConceptError(f"Invalid concept fields: {e.errors()}") from e


class ConceptRequestBuilder:
    """Picks the request shape and normalizes provider failures."""

    def __init__(self, gateway: ConceptGateway):
        self.gateway = gateway

    async def request_concept(self, profile: TasteProfile, keywords: Optional[str] = None) -> PlaylistConcept:
        keywords = (keywords or "").strip()
        try:
            if keywords:
                log.info("[concept] Requesting keyword concept: %r", keywords)
                concept = await self.gateway.generate_concept_from_keywords(keywords, profile)
            else:
                log.info("[concept] Requesting profile concept (mood=%s)", profile.mood_tendency)
                concept = await self.gateway.generate_concept(profile)
        except ConceptGenerationFailed:
            raise
        except Exception as e:
            log.error("[concept] Provider call failed: %s", e, exc_info=True)
            raise ConceptGenerationFailed(f"Concept provider error: {e}") from e
        log.info("[concept] Concept ready: %r", concept.name)
        return concept
