"""Prompt templates for contract classification and analysis."""

from schemas.contract import AnalysisTier

CLASSIFICATION_PROMPT = """Analyze the given contract text and identify its type.
Respond with only the contract type as a single string (e.g., "Employment", "Non-Disclosure Agreement", "Sales", "Lease", etc.).
Exclude any additional explanation or details.

Contract text:
{contract_text}
"""

_FREE_INSTRUCTIONS = """Provide a concise analysis:
1. Identify the top 10 risks for the party receiving this contract, each with a short explanation and a severity (low, medium, high).
2. Identify the top 10 opportunities or benefits, each with a short explanation and an impact (low, medium, high).
3. Write a brief summary of the contract."""

_PREMIUM_INSTRUCTIONS = """Provide a thorough analysis:
1. Identify up to 20 risks for the party receiving this contract, each with a detailed explanation and a severity (low, medium, high).
2. Identify up to 20 opportunities or benefits, each with a detailed explanation and an impact (low, medium, high).
3. Write a comprehensive summary covering parties, obligations, term and termination.
4. List concrete recommendations for negotiating or improving the contract.
5. List the key clauses of the contract.
6. Give an overall score from 0 (very unfavorable) to 100 (very favorable)."""

_FREE_FORMAT = """{
  "risks": [{"risk": "...", "explanation": "...", "severity": "low|medium|high"}],
  "opportunities": [{"opportunity": "...", "explanation": "...", "impact": "low|medium|high"}],
  "summary": "..."
}"""

_PREMIUM_FORMAT = """{
  "risks": [{"risk": "...", "explanation": "...", "severity": "low|medium|high"}],
  "opportunities": [{"opportunity": "...", "explanation": "...", "impact": "low|medium|high"}],
  "summary": "...",
  "recommendations": ["..."],
  "keyClauses": ["..."],
  "overallScore": 0
}"""

ANALYSIS_PROMPT = """Analyze the following {contract_type} contract.
{instructions}

Respond only with a JSON object in exactly this format, with no markdown and no extra text:
{response_format}

Contract text:
{contract_text}
"""


def build_classification_prompt(contract_text: str, max_chars: int = 2000) -> str:
    """Prompt asking for a single contract-type label over a bounded prefix."""
    return CLASSIFICATION_PROMPT.format(contract_text=contract_text[:max_chars])


def build_analysis_prompt(contract_text: str, tier: AnalysisTier, contract_type: str) -> str:
    """Prompt asking for structured findings at the depth of ``tier``."""
    if tier == AnalysisTier.PREMIUM:
        instructions, response_format = _PREMIUM_INSTRUCTIONS, _PREMIUM_FORMAT
    else:
        instructions, response_format = _FREE_INSTRUCTIONS, _FREE_FORMAT
    return ANALYSIS_PROMPT.format(
        contract_type=contract_type,
        instructions=instructions,
        response_format=response_format,
        contract_text=contract_text,
    )
