"""
Strategist LLM Client (OpenRouter)
==================================

Generative pass used when the catalogue yields no viable angle.

Role:
- Read redacted document text + structured facts
- Propose angles / loopholes as JSON
- Output is untrusted: the fallback maps every tag back into the closed
  catalogue before anything leaves the engine
"""

import json
import logging
from typing import Any, Dict, List, Optional
from dataclasses import dataclass

from ..config import get_settings, Settings
from ..errors import GenerativeServiceError
from ..llm_client import parse_json_robust, safe_log_content
from ..schemas import Document, LLMMode
from .openrouter_base import OpenRouterBaseClient

logger = logging.getLogger(__name__)


# Per-document text budget in the prompt
MAX_DOC_CHARS = 6000

STRATEGIST_SYSTEM_PROMPT = """You are a UK litigation strategist reviewing a case bundle.

Identify the strongest procedural and evidential angles available to the
client, using ONLY facts that appear in the documents or structured facts.

Rules:
1. Use only the angle_type and loophole_type values listed in the facts.
2. Do not invent documents, dates or events.
3. Severity is one of CRITICAL, HIGH, MEDIUM, LOW.
4. win_probability is an integer 0-100 reflecting evidential strength.

Return JSON only:
{
  "angles": [
    {
      "angle_type": "<one of allowed_angle_types>",
      "title": "short title",
      "severity": "CRITICAL|HIGH|MEDIUM|LOW",
      "win_probability": 0-100,
      "legal_test": "the test the court applies",
      "legal_basis": "statute / authority",
      "how_to_exploit": "concrete steps"
    }
  ],
  "loopholes": [
    {
      "loophole_type": "<one of allowed_loophole_types>",
      "title": "short title",
      "description": "what the weakness is",
      "severity": "CRITICAL|HIGH|MEDIUM|LOW",
      "suggested_action": "next step",
      "legal_argument": "argument in one or two sentences"
    }
  ]
}

If nothing is supported by the material, return {"angles": [], "loopholes": []}."""


@dataclass
class StrategistStats:
    """Statistics for strategist calls"""
    calls: int = 0
    successful: int = 0
    failed: int = 0
    total_input_tokens: int = 0
    total_output_tokens: int = 0


class OpenRouterStrategist:
    """
    GenerativeService implementation over OpenRouter.

    infer() returns the parsed JSON object or raises GenerativeServiceError.
    """

    def __init__(self, settings: Optional[Settings] = None, client: Optional[OpenRouterBaseClient] = None):
        settings = settings or get_settings()
        self.settings = settings
        self.enabled = settings.llm_mode == LLMMode.OPENROUTER and bool(settings.openrouter_api_key)
        self.stats = StrategistStats()

        self.client = client
        if self.client is None and self.enabled:
            self.client = OpenRouterBaseClient(
                api_key=settings.openrouter_api_key,
                model=settings.openrouter_model,
                base_url=settings.openrouter_base_url,
                timeout=settings.llm_timeout,
            )
            logger.info(f"Strategist initialized with model: {settings.openrouter_model}")
        elif self.client is None:
            logger.info("Strategist disabled: LLM_MODE is not openrouter or OPENROUTER_API_KEY not set")

    async def close(self):
        if self.client:
            await self.client.close()

    @staticmethod
    def build_user_prompt(structured_facts: Dict[str, Any], documents: List[Document]) -> str:
        parts = ["STRUCTURED FACTS:", json.dumps(structured_facts, sort_keys=True, indent=2), "", "DOCUMENTS:"]
        for doc in documents:
            text = (doc.raw_text or "")[:MAX_DOC_CHARS]
            parts.append(f"--- [{doc.id}] {doc.name} ---")
            parts.append(text)
        return "\n".join(parts)

    async def infer(self, structured_facts: Dict[str, Any], documents: List[Document]) -> Dict[str, Any]:
        """
        Run the generative pass.

        Args:
            structured_facts: Category, signals, evidence statuses, allowed tags
            documents: Already-redacted documents

        Returns:
            Parsed JSON object ({"angles": [...], "loopholes": [...]})

        Raises:
            GenerativeServiceError: disabled, HTTP failure, or unparsable output
        """
        if self.client is None:
            raise GenerativeServiceError("Strategist not enabled")

        self.stats.calls += 1

        messages = [
            {"role": "system", "content": STRATEGIST_SYSTEM_PROMPT},
            {"role": "user", "content": self.build_user_prompt(structured_facts, documents)},
        ]

        result = await self.client.call(
            messages=messages,
            response_format={"type": "json_object"},
            temperature=0,
            max_tokens=self.settings.llm_max_tokens,
        )

        if not result.success:
            self.stats.failed += 1
            raise GenerativeServiceError(f"Strategist call failed: {result.error}")

        self.stats.successful += 1
        self.stats.total_input_tokens += result.input_tokens
        self.stats.total_output_tokens += result.output_tokens
        logger.info(f"Strategist response ({result.output_tokens} tokens): {safe_log_content(result.content)}")

        data, ok, error = parse_json_robust(result.content)
        if not ok or not isinstance(data, dict):
            self.stats.failed += 1
            raise GenerativeServiceError(f"Strategist returned unparsable output: {error or 'not an object'}")

        return data

    def get_stats(self) -> Dict[str, Any]:
        return {
            "calls": self.stats.calls,
            "successful": self.stats.successful,
            "failed": self.stats.failed,
            "total_input_tokens": self.stats.total_input_tokens,
            "total_output_tokens": self.stats.total_output_tokens,
        }


# Singleton
_strategist: Optional[OpenRouterStrategist] = None


def get_strategist() -> OpenRouterStrategist:
    """Get singleton strategist instance"""
    global _strategist
    if _strategist is None:
        _strategist = OpenRouterStrategist()
    return _strategist
