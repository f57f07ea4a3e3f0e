"""Common dependencies for FastAPI endpoints.

Process-wide clients (Redis, the language model) are created once in the
application lifespan and kept on ``app.state``; everything built from them
here is request-scoped.
"""

from fastapi import Depends, Request
from redis import asyncio as aioredis
from sqlalchemy.ext.asyncio import AsyncSession

from llm.client import GeminiClient
from models.user import User
from services.analysis import ContractAnalyzer
from services.classification import ContractClassifier
from services.contract_analysis_service import ContractAnalysisService
from services.contract_pipeline import ContractPipeline
from services.extraction import PdfTextExtractor
from services.object_stage import ObjectStage

from .cache import RedisCache
from .config import get_settings
from .database import get_db
from .exceptions import ServiceUnavailableError
from .security import get_token_payload, resolve_user


def get_redis(request: Request) -> aioredis.Redis:
    """The shared Redis client."""
    client = getattr(request.app.state, "redis", None)
    if client is None:
        raise ServiceUnavailableError("Cache store is not connected")
    return client


def get_llm_client(request: Request) -> GeminiClient:
    """The shared language-model client."""
    client = getattr(request.app.state, "llm_client", None)
    if client is None:
        raise ServiceUnavailableError("Language model client is not configured")
    return client


def get_cache(request: Request) -> RedisCache:
    """JSON cache over the shared Redis client; degrades to misses when absent."""
    return RedisCache(getattr(request.app.state, "redis", None))


def get_stage(redis_client: aioredis.Redis = Depends(get_redis)) -> ObjectStage:
    """Staging area for uploaded files."""
    return ObjectStage(redis_client, default_ttl=get_settings().STAGE_TTL_SECONDS)


async def get_current_user(
    payload: dict = Depends(get_token_payload),
    db: AsyncSession = Depends(get_db),
    redis_client: aioredis.Redis = Depends(get_redis),
) -> User:
    """The authenticated, active user of the request."""
    return await resolve_user(db, redis_client, payload)


def get_contract_service(
    db: AsyncSession = Depends(get_db),
    cache: RedisCache = Depends(get_cache),
) -> ContractAnalysisService:
    """Analysis record store for the request."""
    return ContractAnalysisService(db, cache, cache_ttl=get_settings().RECORD_CACHE_TTL_SECONDS)


def get_contract_pipeline(
    stage: ObjectStage = Depends(get_stage),
    llm: GeminiClient = Depends(get_llm_client),
) -> ContractPipeline:
    """A fresh pipeline wired to the shared stage and model client."""
    settings = get_settings()
    return ContractPipeline(
        stage=stage,
        extractor=PdfTextExtractor(stage),
        classifier=ContractClassifier(llm, max_prompt_chars=settings.CLASSIFICATION_PROMPT_CHARS),
        analyzer=ContractAnalyzer(llm),
        stage_ttl=settings.STAGE_TTL_SECONDS,
        language=settings.DEFAULT_LANGUAGE,
    )
