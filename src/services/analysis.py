"""Contract risk/opportunity analysis through the language model."""

import json
import logging
import re
from typing import Any, Dict

from json_repair import repair_json
from pydantic import ValidationError as PydanticValidationError

from core.exceptions import AnalysisError, LLMError
from llm.client import GeminiClient
from llm.prompts import build_analysis_prompt
from schemas.contract import AnalysisFindings, AnalysisTier

logger = logging.getLogger(__name__)

REQUIRED_FIELDS = ("summary", "risks", "opportunities")


def parse_model_json(text: str) -> Dict[str, Any]:
    """Parse a JSON object out of a model answer.

    Tolerates markdown code fences and text around the object; falls back to
    ``json_repair`` for slightly malformed JSON.
    """
    cleaned = (text or "").strip()
    fenced = re.search(r"```(?:json)?\s*([\s\S]*?)```", cleaned)
    if fenced:
        cleaned = fenced.group(1).strip()

    start, end = cleaned.find("{"), cleaned.rfind("}")
    if start != -1 and end > start:
        cleaned = cleaned[start:end + 1]

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        data = repair_json(cleaned, return_objects=True)

    if not isinstance(data, dict):
        raise ValueError("No JSON object found in response")
    return data


class ContractAnalyzer:
    """Produces validated findings for a contract."""

    def __init__(self, llm: GeminiClient):
        self.llm = llm

    @property
    def model_name(self) -> str:
        return self.llm.model

    async def analyze(self, text: str, tier: AnalysisTier, contract_type: str) -> AnalysisFindings:
        """Analyze ``text`` as a ``contract_type`` contract at ``tier`` depth.

        Raises:
            AnalysisError: If the model call fails, or its answer is not JSON
                or lacks summary, risks or opportunities
        """
        tier = AnalysisTier(tier)
        prompt = build_analysis_prompt(text, tier, contract_type)

        try:
            raw = await self.llm.generate_content(prompt, response_mime_type="application/json")
        except LLMError as e:
            logger.error(f"Contract analysis call failed: {e}")
            raise AnalysisError() from e

        try:
            data = parse_model_json(raw)
        except ValueError as e:
            logger.error(f"Contract analysis returned unparseable output: {raw[:200]!r}")
            raise AnalysisError("Contract analysis returned an invalid response") from e

        missing = [name for name in REQUIRED_FIELDS if name not in data]
        if missing:
            logger.error(f"Contract analysis response missing fields: {missing}")
            raise AnalysisError(
                "Contract analysis response is incomplete",
                details={"missing_fields": missing},
            )

        try:
            findings = AnalysisFindings.model_validate(data)
        except PydanticValidationError as e:
            fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
            logger.error(f"Contract analysis response failed validation: {fields}")
            raise AnalysisError(
                "Contract analysis response is invalid",
                details={"invalid_fields": fields},
            ) from e

        logger.info(
            f"Analyzed {contract_type} contract ({tier.value}): "
            f"{len(findings.risks)} risks, {len(findings.opportunities)} opportunities"
        )
        return findings
