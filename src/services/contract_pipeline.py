"""Request-scoped contract processing pipeline.

Both contract flows share one shape::

    received -> staged -> processed -> cleaned -> completed
                 \\__________ any failure __________/-> failed

The staged upload is deleted whatever the outcome of processing. Nothing is
retried: a failed run is final and the client uploads again.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Awaitable, Callable, List, Optional, TypeVar

from core.exceptions import BaseAPIException
from schemas.contract import AnalysisTier, ContractAnalysisResponse
from .analysis import ContractAnalyzer
from .classification import ContractClassifier
from .contract_analysis_service import ContractAnalysisService
from .extraction import PdfTextExtractor
from .object_stage import ObjectStage

logger = logging.getLogger(__name__)

T = TypeVar("T")


class PipelineState(str, Enum):
    """States of one pipeline run."""
    RECEIVED = "received"
    STAGED = "staged"
    PROCESSED = "processed"
    CLEANED = "cleaned"
    COMPLETED = "completed"
    FAILED = "failed"


TERMINAL_STATES = {PipelineState.COMPLETED, PipelineState.FAILED}


@dataclass
class PipelineRun:
    """Bookkeeping for one request travelling through the pipeline."""
    flow: str
    user_id: str
    state: PipelineState = PipelineState.RECEIVED
    staged_key: Optional[str] = None
    history: List[PipelineState] = field(default_factory=lambda: [PipelineState.RECEIVED])

    def advance(self, state: PipelineState) -> None:
        if self.state in TERMINAL_STATES:
            raise RuntimeError(f"Pipeline run already {self.state.value}")
        self.state = state
        self.history.append(state)
        logger.debug(f"[{self.flow}] user={self.user_id} -> {state.value}")


class ContractPipeline:
    """Stages an upload, runs the adapters on it and always cleans up."""

    def __init__(
        self,
        stage: ObjectStage,
        extractor: PdfTextExtractor,
        classifier: ContractClassifier,
        analyzer: ContractAnalyzer,
        stage_ttl: Optional[int] = None,
        language: str = "en",
    ):
        self.stage = stage
        self.extractor = extractor
        self.classifier = classifier
        self.analyzer = analyzer
        self.stage_ttl = stage_ttl
        self.language = language
        self.last_run: Optional[PipelineRun] = None

    async def detect_type(self, user_id: str, payload: bytes) -> str:
        """Detect the contract type of an uploaded PDF."""
        run = PipelineRun(flow="detect-type", user_id=user_id)

        async def process(text: str) -> str:
            return await self.classifier.classify(text)

        label = await self._run(run, payload, process)
        run.advance(PipelineState.COMPLETED)
        logger.info(f"[detect-type] user={user_id} completed: {label}")
        return label

    async def analyze(
        self,
        user_id: str,
        payload: bytes,
        tier: AnalysisTier,
        contract_type: str,
        store: ContractAnalysisService,
    ) -> ContractAnalysisResponse:
        """Analyze an uploaded PDF and persist the result."""
        run = PipelineRun(flow="analyze", user_id=user_id)
        extracted = {}

        async def process(text: str):
            extracted["text"] = text
            return await self.analyzer.analyze(text, tier, contract_type)

        findings = await self._run(run, payload, process)

        try:
            record = await store.create(
                user_id=user_id,
                contract_text=extracted["text"],
                contract_type=contract_type,
                findings=findings,
                ai_model=self.analyzer.model_name,
                language=self.language,
            )
        except Exception:
            run.advance(PipelineState.FAILED)
            logger.exception(f"[analyze] user={user_id} failed to persist analysis")
            raise

        run.advance(PipelineState.COMPLETED)
        logger.info(f"[analyze] user={user_id} completed: record {record.id}")
        return record

    async def _run(
        self,
        run: PipelineRun,
        payload: bytes,
        process: Callable[[str], Awaitable[T]],
    ) -> T:
        """Stage, extract, process and clean up; returns the processing result."""
        self.last_run = run
        key = self.stage.new_key(run.user_id)

        try:
            await self.stage.put(key, payload, self.stage_ttl)
        except Exception:
            run.advance(PipelineState.FAILED)
            raise
        run.staged_key = key
        run.advance(PipelineState.STAGED)

        failure: Optional[BaseException] = None
        try:
            text = await self.extractor.extract(key)
            result = await process(text)
            run.advance(PipelineState.PROCESSED)
        except BaseException as e:
            failure = e
            raise
        finally:
            await self._cleanup(run, failure)

        run.advance(PipelineState.CLEANED)
        return result

    async def _cleanup(self, run: PipelineRun, failure: Optional[BaseException]) -> None:
        try:
            await self.stage.delete(run.staged_key)
        except Exception as e:
            if failure is None:
                run.advance(PipelineState.FAILED)
                raise
            # Keep the processing error; the TTL reclaims the entry
            logger.error(f"[{run.flow}] cleanup of {run.staged_key} failed after an earlier error: {e}")

        if failure is not None:
            run.advance(PipelineState.FAILED)
            level = logging.WARNING if isinstance(failure, BaseAPIException) else logging.ERROR
            logger.log(level, f"[{run.flow}] user={run.user_id} failed: {type(failure).__name__}: {failure}")
