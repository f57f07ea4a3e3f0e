"""Integration tests for the contract endpoints."""

import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from core.cache import RedisCache, contract_cache_key
from core.config import get_settings
from core.dependencies import get_contract_service
from core.exceptions import LLMError
from models.contract_analysis import ContractAnalysis
from services.contract_analysis_service import ContractAnalysisService

PDF = "application/pdf"


def upload(content: bytes, content_type: str = PDF, name: str = "contract.pdf"):
    return {"contract": (name, content, content_type)}


class TestAuthentication:
    """Every contract endpoint requires a session."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "method,path",
        [
            ("post", "/api/contracts/detect-type"),
            ("post", "/api/contracts/analyze"),
            ("get", "/api/contracts"),
            ("get", f"/api/contracts/{uuid.uuid4()}"),
        ],
    )
    async def test_requires_session(self, client, method, path):
        response = await getattr(client, method)(path)

        assert response.status_code == 401
        assert response.json()["error"] == "unauthorized"

    @pytest.mark.asyncio
    async def test_invalid_token(self, client):
        response = await client.get("/api/contracts", headers={"Authorization": "Bearer nope"})
        assert response.status_code == 401


class TestDetectType:
    """Test POST /api/contracts/detect-type."""

    @pytest.mark.asyncio
    async def test_detects_type(self, client, login, user, lease_pdf, redis_client):
        login(user)
        response = await client.post("/api/contracts/detect-type", files=upload(lease_pdf))

        assert response.status_code == 200
        assert response.json() == {"detectedType": "Lease"}
        assert redis_client.live_keys() == []

    @pytest.mark.asyncio
    async def test_no_file(self, client, login, user):
        login(user)
        response = await client.post("/api/contracts/detect-type")

        assert response.status_code == 400
        assert response.json()["message"] == "File not uploaded"

    @pytest.mark.asyncio
    async def test_two_files(self, client, login, user, lease_pdf):
        login(user)
        files = [
            ("contract", ("a.pdf", lease_pdf, PDF)),
            ("contract", ("b.pdf", lease_pdf, PDF)),
        ]
        response = await client.post("/api/contracts/detect-type", files=files)

        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_not_a_pdf(self, client, login, user, redis_client):
        login(user)
        response = await client.post(
            "/api/contracts/detect-type",
            files=upload(b"hello", content_type="text/plain", name="notes.txt"),
        )

        assert response.status_code == 415
        body = response.json()
        assert body["error"] == "invalid_file_type"
        assert body["message"] == "Provide files in PDF format only"
        assert redis_client.live_keys() == []

    @pytest.mark.asyncio
    async def test_too_large(self, client, login, user, monkeypatch):
        login(user)
        monkeypatch.setattr(get_settings(), "MAX_UPLOAD_BYTES", 16)
        response = await client.post("/api/contracts/detect-type", files=upload(b"%PDF-" + b"0" * 64))

        assert response.status_code == 413

    @pytest.mark.asyncio
    async def test_unreadable_pdf(self, client, login, user, redis_client):
        login(user)
        response = await client.post("/api/contracts/detect-type", files=upload(b"%PDF-garbage"))

        assert response.status_code == 500
        assert response.json()["error"] == "extraction_failed"
        assert redis_client.live_keys() == []

    @pytest.mark.asyncio
    async def test_model_failure(self, client, login, user, lease_pdf, fake_llm, redis_client):
        login(user)
        fake_llm.error = LLMError("quota exceeded")
        response = await client.post("/api/contracts/detect-type", files=upload(lease_pdf))

        assert response.status_code == 500
        assert response.json()["error"] == "classification_failed"
        assert redis_client.live_keys() == []


class TestAnalyze:
    """Test POST /api/contracts/analyze."""

    @pytest.mark.asyncio
    async def test_analyzes_and_stores(self, client, login, user, lease_pdf, contract_store, redis_client):
        login(user)
        response = await client.post(
            "/api/contracts/analyze",
            files=upload(lease_pdf),
            data={"contractType": "Lease"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["contractType"] == "Lease"
        assert body["userId"] == user.id
        assert body["risks"][0]["risk"] == "Automatic renewal"
        assert body["aiModel"] == "gemini-test"
        assert body["id"] in contract_store.records
        assert redis_client.live_keys() == []

    @pytest.mark.asyncio
    async def test_missing_contract_type(self, client, login, user, lease_pdf, contract_store):
        login(user)
        response = await client.post("/api/contracts/analyze", files=upload(lease_pdf))

        assert response.status_code == 400
        assert response.json()["message"] == "No contract type provided"
        assert contract_store.records == {}

    @pytest.mark.asyncio
    async def test_premium_user_gets_premium_prompt(self, client, login, user, lease_pdf, fake_llm):
        user.is_premium = True
        login(user)
        response = await client.post(
            "/api/contracts/analyze",
            files=upload(lease_pdf),
            data={"contractType": "Lease"},
        )

        assert response.status_code == 200
        assert "overallScore" in fake_llm.prompts[-1]

    @pytest.mark.asyncio
    async def test_incomplete_model_answer(self, client, login, user, lease_pdf, fake_llm, contract_store):
        login(user)
        fake_llm.analysis = '{"summary": "only this"}'
        response = await client.post(
            "/api/contracts/analyze",
            files=upload(lease_pdf),
            data={"contractType": "Lease"},
        )

        assert response.status_code == 500
        assert response.json()["error"] == "analysis_failed"
        assert contract_store.records == {}


class TestReadContracts:
    """Test GET /api/contracts and GET /api/contracts/{id}."""

    async def _analyze(self, client, pdf, contract_type="Lease"):
        response = await client.post(
            "/api/contracts/analyze",
            files=upload(pdf),
            data={"contractType": contract_type},
        )
        assert response.status_code == 200
        return response.json()

    @pytest.mark.asyncio
    async def test_list_newest_first(self, client, login, user, lease_pdf):
        login(user)
        first = await self._analyze(client, lease_pdf, "Lease")
        second = await self._analyze(client, lease_pdf, "Sublease")

        response = await client.get("/api/contracts")

        assert response.status_code == 200
        assert [r["id"] for r in response.json()] == [second["id"], first["id"]]

    @pytest.mark.asyncio
    async def test_list_empty(self, client, login, user):
        login(user)
        response = await client.get("/api/contracts")

        assert response.status_code == 200
        assert response.json() == []

    @pytest.mark.asyncio
    async def test_get_own_contract(self, client, login, user, lease_pdf):
        login(user)
        created = await self._analyze(client, lease_pdf)

        response = await client.get(f"/api/contracts/{created['id']}")

        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_other_users_contract_is_not_found(self, client, login, user, other_user, lease_pdf):
        login(user)
        created = await self._analyze(client, lease_pdf)

        login(other_user)
        response = await client.get(f"/api/contracts/{created['id']}")
        listing = await client.get("/api/contracts")

        assert response.status_code == 404
        assert listing.json() == []

    @pytest.mark.asyncio
    async def test_unknown_contract(self, client, login, user):
        login(user)
        response = await client.get(f"/api/contracts/{uuid.uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"

    @pytest.mark.asyncio
    async def test_malformed_id(self, client, login, user):
        login(user)
        response = await client.get("/api/contracts/not-a-uuid")

        assert response.status_code == 400
        assert response.json()["message"] == "Invalid contract ID"


class TestContractTypeLimit:
    """The analyze form rejects contract types wider than the stored column."""

    @pytest.mark.asyncio
    async def test_overlong_contract_type(self, client, login, user, lease_pdf, fake_llm, redis_client, contract_store):
        login(user)
        response = await client.post(
            "/api/contracts/analyze",
            files=upload(lease_pdf),
            data={"contractType": "X" * 201},
        )

        assert response.status_code == 400
        assert response.json()["details"] == {"max_length": 200}
        assert fake_llm.prompts == []
        assert redis_client.live_keys() == []
        assert contract_store.records == {}

    @pytest.mark.asyncio
    async def test_contract_type_at_limit(self, client, login, user, lease_pdf):
        login(user)
        response = await client.post(
            "/api/contracts/analyze",
            files=upload(lease_pdf),
            data={"contractType": "X" * 200},
        )

        assert response.status_code == 200
        assert response.json()["contractType"] == "X" * 200


class TestRecordServiceOverHttp:
    """GET /api/contracts/{id} through ContractAnalysisService and the Redis cache."""

    @pytest.fixture
    def record(self, user):
        return ContractAnalysis(
            id=str(uuid.uuid4()),
            user_id=user.id,
            contract_text="This lease agreement ...",
            contract_type="Lease",
            summary="A lease.",
            risks=[{"risk": "Renewal", "explanation": "Auto renews", "severity": "low"}],
            opportunities=[],
            recommendations=[],
            key_clauses=[],
            overall_score=None,
            ai_model="gemini-test",
            language="en",
            created_at=datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc),
        )

    @pytest.fixture
    def db(self, record):
        session = AsyncMock(spec=AsyncSession)
        result = MagicMock()
        result.scalar_one_or_none.return_value = record
        session.execute.return_value = result
        return session

    @pytest.fixture(autouse=True)
    def real_service(self, app, db, redis_client):
        app.dependency_overrides[get_contract_service] = lambda: ContractAnalysisService(db, RedisCache(redis_client))

    @pytest.mark.asyncio
    async def test_read_through_cache(self, client, login, user, record, db, redis_client):
        login(user)

        first = await client.get(f"/api/contracts/{record.id}")
        second = await client.get(f"/api/contracts/{record.id}")

        assert first.status_code == 200
        assert first.content == second.content
        assert first.json()["userId"] == user.id
        assert db.execute.await_count == 1
        assert contract_cache_key(record.id) in redis_client.live_keys()

    @pytest.mark.asyncio
    async def test_cached_record_hidden_from_other_user(self, client, login, user, other_user, record, db):
        login(user)
        assert (await client.get(f"/api/contracts/{record.id}")).status_code == 200

        login(other_user)
        response = await client.get(f"/api/contracts/{record.id}")

        assert response.status_code == 404
        assert response.json()["error"] == "not_found"
        assert db.execute.await_count == 1

    @pytest.mark.asyncio
    async def test_absent_record(self, client, login, user, db):
        db.execute.return_value.scalar_one_or_none.return_value = None
        login(user)

        response = await client.get(f"/api/contracts/{uuid.uuid4()}")

        assert response.status_code == 404
