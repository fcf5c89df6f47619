"""
Advisory Agent

DESIGN DECISION: The LLM is a black-box tip producer.

CRITICAL BOUNDARIES:
- CAN: Read the actor's APPROVED, non-Requisition entries (amount,
  type, category, date only - never notes or submitter names)
- CAN: Return up to N short tips
- CANNOT: Change the ledger in any way
- NEVER raises: any failure yields the fixed fallback tips

The caller decides what the agent may see; this module only formats
the prompt and parses the answer.
"""

import json
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import ValidationError as SchemaError

from finvue.config import GeminiSettings, get_settings
from finvue.models.ledger import AdvisoryTip, TipType, Transaction


logger = structlog.get_logger()


EMPTY_LEDGER_TIPS = (
    AdvisoryTip(tip="Start adding your expenses to get personalized AI tips!", type=TipType.INFO),
)

FALLBACK_TIPS = (
    AdvisoryTip(tip="Stay consistent with tracking to see long-term patterns.", type=TipType.INFO),
    AdvisoryTip(tip="Review your subscriptions; they often go unnoticed.", type=TipType.SAVING),
)


class AdvisoryAgent:
    """
    Generates financial tips from approved ledger entries.

    RESPONSIBILITIES:
    - Summarize the entries into a compact prompt
    - Parse the JSON list of tips out of the model's answer
    - Fall back to fixed tips on any failure
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        """
        Args:
            settings: Gemini settings, read from the environment when None
            model: Pre-built model exposing `generate_content_async`;
                   built from settings when None
        """
        self._settings = settings or get_settings().gemini
        self._model = model or self._configure_genai()
        self.last_error: Optional[str] = None

    def _configure_genai(self):
        """Configure Google Generative AI."""
        genai.configure(api_key=self._settings.api_key)
        return genai.GenerativeModel(
            model_name=self._settings.model_name,
            generation_config={
                "temperature": self._settings.temperature,
                "max_output_tokens": self._settings.max_tokens,
            }
        )

    def _build_prompt(self, transactions: list[Transaction]) -> str:
        entries = [
            {
                "amount": str(t.amount),
                "type": t.type.value,
                "category": t.category,
                "date": t.occurred_on.isoformat(),
            }
            for t in transactions
        ]
        return f"""Analyze these financial transactions and provide {self._settings.max_tips} friendly, short, actionable financial tips.

Transactions:
{json.dumps(entries)}

Respond with ONLY a JSON array in this exact format:
[{{"tip": "short tip text", "type": "saving"}}]

"type" must be one of: saving, warning, info."""

    def _parse_tips(self, text: str) -> list[AdvisoryTip]:
        start = text.find("[")
        end = text.rfind("]") + 1
        if start < 0 or end <= start:
            raise ValueError("No JSON array in model response")

        data = json.loads(text[start:end])
        tips = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                tips.append(AdvisoryTip.model_validate(item))
            except SchemaError:
                # Unknown tip types become info rather than dropping the tip
                if isinstance(item.get("tip"), str) and item["tip"].strip():
                    tips.append(AdvisoryTip(tip=item["tip"].strip()[:500], type=TipType.INFO))
        if not tips:
            raise ValueError("Model response contained no usable tips")
        return tips[:self._settings.max_tips]

    async def generate_tips(self, transactions: list[Transaction]) -> list[AdvisoryTip]:
        """
        Produce tips for the given (already scoped and filtered) entries.

        Never raises. Check `last_error` to see whether the fallback was used.
        """
        self.last_error = None
        if not transactions:
            return list(EMPTY_LEDGER_TIPS)

        try:
            response = await self._model.generate_content_async(self._build_prompt(transactions))
            return self._parse_tips(response.text.strip())
        except Exception as e:
            self.last_error = str(e)
            logger.warning("advisory_fallback", error=str(e))
            return list(FALLBACK_TIPS)
