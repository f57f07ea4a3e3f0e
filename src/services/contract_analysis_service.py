"""Service for storing and reading contract analyses."""

from typing import List, Optional
import logging

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from core.cache import RedisCache, contract_cache_key
from core.exceptions import NotFoundError
from models.contract_analysis import ContractAnalysis
from schemas.contract import AnalysisFindings, ContractAnalysisResponse

logger = logging.getLogger(__name__)

DEFAULT_RECORD_CACHE_TTL = 3600


class ContractAnalysisService:
    """Persists analyses and serves them through a read-through cache.

    Records are immutable once created, so cache entries are never
    invalidated; they simply expire.
    """

    def __init__(self, db: AsyncSession, cache: RedisCache, cache_ttl: int = DEFAULT_RECORD_CACHE_TTL):
        self.db = db
        self.cache = cache
        self.cache_ttl = cache_ttl

    async def create(
        self,
        user_id: str,
        contract_text: str,
        contract_type: str,
        findings: AnalysisFindings,
        ai_model: str,
        language: str = "en",
    ) -> ContractAnalysisResponse:
        """Persist a new analysis and return it with its id and timestamp."""
        record = ContractAnalysis(
            user_id=user_id,
            contract_text=contract_text,
            contract_type=contract_type,
            summary=findings.summary,
            risks=[risk.model_dump() for risk in findings.risks],
            opportunities=[opportunity.model_dump() for opportunity in findings.opportunities],
            recommendations=list(findings.recommendations),
            key_clauses=list(findings.key_clauses),
            overall_score=findings.overall_score,
            ai_model=ai_model,
            language=language,
        )

        self.db.add(record)
        await self.db.commit()
        await self.db.refresh(record)

        logger.info(f"Created contract analysis {record.id} for user {user_id}")
        stored = ContractAnalysisResponse.model_validate(record)
        await self._cache_record(stored)
        return stored

    async def list_by_user(self, user_id: str) -> List[ContractAnalysisResponse]:
        """List a user's analyses, newest first."""
        result = await self.db.execute(
            select(ContractAnalysis)
            .where(ContractAnalysis.user_id == user_id)
            .order_by(ContractAnalysis.created_at.desc())
        )
        return [ContractAnalysisResponse.model_validate(row) for row in result.scalars().all()]

    async def get_by_id(self, user_id: str, contract_id: str) -> ContractAnalysisResponse:
        """Get one of the user's analyses.

        A record owned by another user is reported exactly like a missing one.
        """
        cached = await self._get_cached(contract_id)
        if cached is not None:
            if cached.user_id != user_id:
                raise NotFoundError("Contract not found")
            logger.debug(f"Cache hit for contract {contract_id}")
            return cached

        result = await self.db.execute(
            select(ContractAnalysis).where(
                ContractAnalysis.id == contract_id,
                ContractAnalysis.user_id == user_id,
            )
        )
        record = result.scalar_one_or_none()
        if record is None:
            raise NotFoundError("Contract not found")

        stored = ContractAnalysisResponse.model_validate(record)
        await self._cache_record(stored)
        return stored

    async def _get_cached(self, contract_id: str) -> Optional[ContractAnalysisResponse]:
        data = await self.cache.get(contract_cache_key(contract_id))
        if data is None:
            return None
        try:
            return ContractAnalysisResponse.model_validate(data)
        except ValueError as e:
            logger.warning(f"Discarding malformed cache entry for contract {contract_id}: {e}")
            await self.cache.delete(contract_cache_key(contract_id))
            return None

    async def _cache_record(self, record: ContractAnalysisResponse) -> None:
        await self.cache.set(
            contract_cache_key(record.id),
            record.model_dump(mode="json"),
            expire=self.cache_ttl,
        )
