"""
LLM module for contract classification and analysis.

Holds the client for the hosted language model and the prompts sent to it.
"""

from .client import GeminiClient
from .prompts import build_classification_prompt, build_analysis_prompt

__all__ = [
    'GeminiClient',
    'build_classification_prompt',
    'build_analysis_prompt',
]
