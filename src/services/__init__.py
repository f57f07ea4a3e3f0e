"""Service layer for business logic."""

from .object_stage import ObjectStage
from .extraction import PdfTextExtractor
from .classification import ContractClassifier
from .analysis import ContractAnalyzer
from .contract_analysis_service import ContractAnalysisService
from .contract_pipeline import ContractPipeline, PipelineRun, PipelineState

__all__ = [
    "ObjectStage",
    "PdfTextExtractor",
    "ContractClassifier",
    "ContractAnalyzer",
    "ContractAnalysisService",
    "ContractPipeline",
    "PipelineRun",
    "PipelineState",
]
