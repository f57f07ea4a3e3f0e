"""Contract type detection through the language model."""

import logging

from core.exceptions import ClassificationError, LLMError
from llm.client import GeminiClient
from llm.prompts import build_classification_prompt

logger = logging.getLogger(__name__)

DEFAULT_PROMPT_CHARS = 2000
MAX_LABEL_LENGTH = 200


class ContractClassifier:
    """Turns contract text into a short contract-type label."""

    def __init__(self, llm: GeminiClient, max_prompt_chars: int = DEFAULT_PROMPT_CHARS):
        self.llm = llm
        self.max_prompt_chars = max_prompt_chars

    async def classify(self, text: str) -> str:
        """Detect the contract type of ``text``.

        Only the first ``max_prompt_chars`` characters are sent to the model.
        """
        prompt = build_classification_prompt(text, self.max_prompt_chars)
        try:
            raw = await self.llm.generate_content(prompt)
        except LLMError as e:
            logger.error(f"Contract type detection call failed: {e}")
            raise ClassificationError() from e

        label = self._clean_label(raw)
        if not label:
            logger.error(f"Contract type detection returned an unusable answer: {raw!r}")
            raise ClassificationError("Contract type detection returned no result")

        logger.info(f"Detected contract type: {label}")
        return label

    @staticmethod
    def _clean_label(raw: str) -> str:
        lines = [line for line in (raw or "").strip().splitlines() if line.strip()]
        if not lines:
            return ""
        label = lines[0].strip(" \t`*\"'")
        label = label.rstrip(".").strip(" \t`*\"'")
        if len(label) > MAX_LABEL_LENGTH:
            return ""
        return label
