"""Pytest configuration for tests."""

import os
import time
import uuid
from datetime import datetime, timedelta, timezone
from typing import AsyncGenerator, Dict, List, Optional
from unittest.mock import AsyncMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["GEMINI_API_KEY"] = "test-api-key"

from core.exceptions import NotFoundError  # noqa: E402
from models.user import User  # noqa: E402
from schemas.contract import AnalysisFindings, ContractAnalysisResponse  # noqa: E402
from services.object_stage import ObjectStage  # noqa: E402


class InMemoryRedis:
    """Async Redis double covering the commands the app uses, with expiry."""

    def __init__(self):
        self.store: Dict[str, bytes] = {}
        self.expires_at: Dict[str, float] = {}

    def _purge(self, key: str) -> None:
        deadline = self.expires_at.get(key)
        if deadline is not None and time.monotonic() >= deadline:
            self.store.pop(key, None)
            self.expires_at.pop(key, None)

    async def ping(self) -> bool:
        return True

    async def set(self, key: str, value, ex: Optional[int] = None) -> bool:
        if isinstance(value, str):
            value = value.encode("utf-8")
        self.store[key] = bytes(value)
        if ex:
            self.expires_at[key] = time.monotonic() + ex
        else:
            self.expires_at.pop(key, None)
        return True

    async def get(self, key: str) -> Optional[bytes]:
        self._purge(key)
        return self.store.get(key)

    async def delete(self, *keys: str) -> int:
        removed = 0
        for key in keys:
            self._purge(key)
            if self.store.pop(key, None) is not None:
                removed += 1
            self.expires_at.pop(key, None)
        return removed

    async def exists(self, *keys: str) -> int:
        count = 0
        for key in keys:
            self._purge(key)
            count += key in self.store
        return count

    async def aclose(self) -> None:
        pass

    def live_keys(self) -> List[str]:
        for key in list(self.store):
            self._purge(key)
        return list(self.store)


class ScriptedLLM:
    """Stands in for GeminiClient; answers by prompt kind and records prompts."""

    def __init__(self, label: str = "Lease", analysis: Optional[str] = None):
        self.model = "gemini-test"
        self.label = label
        self.analysis = analysis if analysis is not None else (
            '{"summary": "A residential lease between landlord and tenant.",'
            ' "risks": [{"risk": "Automatic renewal", "explanation": "Renews yearly", "severity": "medium"}],'
            ' "opportunities": [{"opportunity": "Fixed rent", "explanation": "No increase for a year", "impact": "high"}]}'
        )
        self.error: Optional[Exception] = None
        self.prompts: List[str] = []

    async def generate_content(self, prompt: str, response_mime_type=None) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        if "identify its type" in prompt:
            return self.label
        return self.analysis

    async def close(self) -> None:
        pass


class InMemoryContractStore:
    """Record store double with the ownership rules of ContractAnalysisService."""

    def __init__(self):
        self.records: Dict[str, ContractAnalysisResponse] = {}
        self._clock = datetime(2026, 1, 1, tzinfo=timezone.utc)

    async def create(self, user_id, contract_text, contract_type, findings: AnalysisFindings,
                     ai_model, language="en") -> ContractAnalysisResponse:
        self._clock += timedelta(seconds=1)
        record = ContractAnalysisResponse(
            id=str(uuid.uuid4()),
            user_id=user_id,
            contract_text=contract_text,
            contract_type=contract_type,
            summary=findings.summary,
            risks=findings.risks,
            opportunities=findings.opportunities,
            recommendations=findings.recommendations,
            key_clauses=findings.key_clauses,
            overall_score=findings.overall_score,
            ai_model=ai_model,
            language=language,
            created_at=self._clock,
        )
        self.records[record.id] = record
        return record

    async def list_by_user(self, user_id):
        owned = [r for r in self.records.values() if r.user_id == user_id]
        return sorted(owned, key=lambda r: r.created_at, reverse=True)

    async def get_by_id(self, user_id, contract_id):
        record = self.records.get(contract_id)
        if record is None or record.user_id != user_id:
            raise NotFoundError("Contract not found")
        return record


def _pdf_escape(text: str) -> str:
    return text.replace("\\", "\\\\").replace("(", "\\(").replace(")", "\\)")


def make_pdf(pages: List[str]) -> bytes:
    """Build a minimal, well-formed PDF with one line of Helvetica text per page."""
    page_count = len(pages)
    font_id = 3
    first_page_id = 4
    objects: Dict[int, bytes] = {
        1: b"<< /Type /Catalog /Pages 2 0 R >>",
        font_id: b"<< /Type /Font /Subtype /Type1 /BaseFont /Helvetica >>",
    }
    kids = []
    for index, text in enumerate(pages):
        page_id = first_page_id + index * 2
        content_id = page_id + 1
        kids.append(f"{page_id} 0 R")
        stream = f"BT /F1 12 Tf 72 720 Td ({_pdf_escape(text)}) Tj ET".encode("latin-1") if text else b""
        objects[page_id] = (
            f"<< /Type /Page /Parent 2 0 R /MediaBox [0 0 612 792] "
            f"/Resources << /Font << /F1 {font_id} 0 R >> >> /Contents {content_id} 0 R >>"
        ).encode("latin-1")
        objects[content_id] = b"<< /Length %d >>\nstream\n" % len(stream) + stream + b"\nendstream"
    objects[2] = f"<< /Type /Pages /Kids [{' '.join(kids)}] /Count {page_count} >>".encode("latin-1")

    out = bytearray(b"%PDF-1.4\n")
    offsets = {}
    for obj_id in sorted(objects):
        offsets[obj_id] = len(out)
        out += b"%d 0 obj\n" % obj_id + objects[obj_id] + b"\nendobj\n"

    xref_offset = len(out)
    size = max(objects) + 1
    out += b"xref\n0 %d\n" % size
    out += b"0000000000 65535 f \n"
    for obj_id in range(1, size):
        out += b"%010d 00000 n \n" % offsets[obj_id]
    out += b"trailer\n<< /Size %d /Root 1 0 R >>\nstartxref\n%d\n%%%%EOF\n" % (size, xref_offset)
    return bytes(out)


@pytest.fixture
def redis_client() -> InMemoryRedis:
    return InMemoryRedis()


@pytest.fixture
def stage(redis_client) -> ObjectStage:
    return ObjectStage(redis_client, default_ttl=3600)


@pytest.fixture
def fake_llm() -> ScriptedLLM:
    return ScriptedLLM()


@pytest.fixture
def lease_pdf() -> bytes:
    return make_pdf(["This lease agreement is made between Landlord and Tenant."])


@pytest.fixture
def user() -> User:
    return User(id="user-u", email="u@example.com", name="User U", is_active=True, is_premium=False)


@pytest.fixture
def other_user() -> User:
    return User(id="user-v", email="v@example.com", name="User V", is_active=True, is_premium=False)


@pytest.fixture
def contract_store() -> InMemoryContractStore:
    return InMemoryContractStore()


@pytest.fixture
def app(redis_client, fake_llm, contract_store):
    """Application with external collaborators replaced by test doubles."""
    from core.app import create_app
    from core.database import get_db
    from core.dependencies import get_contract_service, get_llm_client, get_redis

    async def override_db() -> AsyncGenerator[AsyncSession, None]:
        yield AsyncMock(spec=AsyncSession)

    application = create_app()
    application.dependency_overrides[get_db] = override_db
    application.dependency_overrides[get_redis] = lambda: redis_client
    application.dependency_overrides[get_llm_client] = lambda: fake_llm
    application.dependency_overrides[get_contract_service] = lambda: contract_store
    application.state.redis = redis_client
    return application


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """Unauthenticated test client."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


@pytest.fixture
def login(app):
    """Authenticate subsequent requests as the given user."""
    from core.dependencies import get_current_user

    def _login(as_user: User) -> None:
        app.dependency_overrides[get_current_user] = lambda: as_user

    return _login
