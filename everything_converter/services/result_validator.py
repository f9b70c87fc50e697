"""
Second-pass validator for conversion answers.

Asks a strict-validator prompt to re-check the primary answer. The pass is
best-effort: it reports failures through ValidationOutcome instead of raising,
so a validator problem can never fail the request.
"""

import logging
from typing import Optional

from everything_converter.models.conversion import ModelSelection, ValidationOutcome
from everything_converter.services.completion_client import CompletionClient
from everything_converter.services.metrics import validator_outcome_counter
from everything_converter.services.prompt_builder import build_validator_messages

logger = logging.getLogger(__name__)

VALIDATOR_TEMPERATURE = 0.0
VALIDATOR_TOP_P = 0.1


class ResultValidator:
    """Deterministic corrective pass over a proposed answer"""

    def __init__(self, completion_client: CompletionClient, max_tokens: int = 300):
        self.completion_client = completion_client
        self.max_tokens = max_tokens

    async def validate(
        self,
        from_text: Optional[str],
        to_text: Optional[str],
        proposed: str,
        selection: Optional[ModelSelection] = None,
    ) -> ValidationOutcome:
        """
        Re-derive or correct ``proposed``.

        Returns:
            ValidationOutcome with the validator's text, or with the error /
            empty answer that made it unusable
        """
        messages = build_validator_messages(from_text or "", to_text or "", proposed)
        try:
            response = await self.completion_client.create_completion(
                messages,
                selection=selection,
                temperature=VALIDATOR_TEMPERATURE,
                top_p=VALIDATOR_TOP_P,
                max_tokens=self.max_tokens,
                endpoint="validator",
            )
            corrected = response.choices[0].message.content if response.choices else None
        except Exception as e:
            logger.warning(f"⚠️  Validator pass failed, keeping original answer: {e}")
            validator_outcome_counter.labels(outcome="failed").inc()
            return ValidationOutcome(error=e)

        outcome = ValidationOutcome(answer=corrected)
        validator_outcome_counter.labels(outcome="corrected" if outcome.ok else "kept").inc()
        return outcome

    @staticmethod
    def record_skipped() -> None:
        validator_outcome_counter.labels(outcome="skipped").inc()
