"""
LLM Module
==========

Generative strategist used by the fallback path.

Environment Variables:
- LLM_MODE: none|openrouter (default: none)
- OPENROUTER_API_KEY: Required when LLM_MODE=openrouter
- OPENROUTER_MODEL: Model id (default: anthropic/claude-3-haiku)
- LLM_TIMEOUT: Seconds before the fallback gives up

Usage:
    from casebrain_engine.llm import get_strategist

    strategist = get_strategist()
    payload = await strategist.infer(structured_facts, redacted_documents)
"""

from .openrouter_base import OpenRouterBaseClient, LLMCallResult
from .strategist import OpenRouterStrategist, StrategistStats, get_strategist

__all__ = [
    # Base
    "OpenRouterBaseClient",
    "LLMCallResult",
    # Strategist
    "OpenRouterStrategist",
    "StrategistStats",
    "get_strategist",
]
