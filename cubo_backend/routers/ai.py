"""
Text-generation Proxy Router — /api/ai

Single endpoint standing between the browser and the generative-text
provider. The provider credential stays on the server.

Endpoints:
    POST /api/ai/benchmarks   — {description, type: benchmark|suggestions, session_id?}
        benchmark   → {"text": "..."}
        suggestions → {"projects": [{name, category, impact, complexity,
                                     description, expectedReturn}]}
"""

import logging
from functools import lru_cache

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from .. import crud
from ..ai.llm_provider import LLMProvider, get_provider
from ..ai.proxy import generate
from ..errors import BackendError, NoActiveSession
from ..schemas import AIRequest

logger = logging.getLogger("cubo.ai")

router = APIRouter(prefix="/api/ai", tags=["AI"])

_COUNTER_FOR_TYPE = {"benchmark": "benchmark", "suggestions": "suggestions"}


@lru_cache(maxsize=1)
def get_llm_provider() -> LLMProvider:
    """FastAPI dependency; one provider per process (overridden in tests)."""
    return get_provider()


@router.post("/benchmarks")
def benchmarks(
    data: AIRequest,
    db: Session = Depends(get_db),
    provider: LLMProvider = Depends(get_llm_provider),
):
    """
    Fetch ROI benchmarks or project suggestions.

    A failing usage counter never blocks the generation itself. Provider
    failures, timeouts and malformed output return 502 with PROXY_ERROR.
    """
    if data.session_id:
        try:
            crud.increment_click_counter(db, data.session_id, _COUNTER_FOR_TYPE[data.type])
        except (BackendError, NoActiveSession) as e:
            logger.warning(f"Usage counter not updated: {e.message}")

    return generate(provider, data.description, data.type)
