"""
Text-generation proxy service.

Turns a {description, type} request into either a benchmark text or a list
of validated project suggestions. Any provider failure or malformed output
surfaces as ProxyError so the caller can report it apart from storage errors.
"""

import json
import logging
import re

from pydantic import ValidationError as PydanticValidationError

from ..errors import ProxyError
from ..schemas import SuggestedProject
from .llm_provider import LLMProvider
from .prompts import SYSTEM_PROMPT, build_prompt

logger = logging.getLogger("cubo.ai")

_FENCE_RE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


def fetch_benchmark(provider: LLMProvider, description: str) -> dict:
    response = provider.complete(build_prompt(description, "benchmark"), SYSTEM_PROMPT)
    text = (response.content or "").strip()
    if not text:
        raise ProxyError("No response from the text-generation service")
    return {"text": text}


def parse_suggestions(raw_text: str) -> list[dict]:
    """
    Parse the suggestions JSON, tolerating a Markdown code fence around it.

    Raises:
        ProxyError: body is not JSON, has no "projects" list, or a project
            fails validation.
    """
    text = _FENCE_RE.sub("", (raw_text or "").strip())
    try:
        payload = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProxyError(
            "Failed to parse AI response",
            context={"raw_text": raw_text[:500] if raw_text else ""},
        ) from e

    projects = payload.get("projects") if isinstance(payload, dict) else None
    if not isinstance(projects, list) or not projects:
        raise ProxyError("AI response did not contain any project suggestions")

    try:
        return [SuggestedProject(**p).model_dump() for p in projects]
    except (PydanticValidationError, TypeError) as e:
        raise ProxyError("AI response contained invalid project suggestions") from e


def fetch_suggestions(provider: LLMProvider, description: str) -> dict:
    response = provider.complete(build_prompt(description, "suggestions"), SYSTEM_PROMPT)
    return {"projects": parse_suggestions(response.content)}


def generate(provider: LLMProvider, description: str, request_type: str) -> dict:
    logger.info(f"Text generation request type={request_type} via {provider.get_name()}")
    if request_type == "suggestions":
        return fetch_suggestions(provider, description)
    return fetch_benchmark(provider, description)
