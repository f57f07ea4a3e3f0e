"""Contract upload, type detection and analysis endpoints."""

import logging
import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, UploadFile, File, Form

from core.config import get_settings
from core.dependencies import get_current_user, get_contract_pipeline, get_contract_service
from core.exceptions import BadRequestError, PayloadTooLargeError, UnsupportedMediaTypeError
from models.contract_analysis import CONTRACT_TYPE_MAX_LENGTH
from models.user import User
from schemas.contract import AnalysisTier, ContractAnalysisResponse, DetectTypeResponse
from services.contract_analysis_service import ContractAnalysisService
from services.contract_pipeline import ContractPipeline

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_MEDIA_TYPE = "application/pdf"


async def read_single_pdf(files: Optional[List[UploadFile]], user_id: str) -> bytes:
    """Admit exactly one PDF part and return its bytes."""
    if not files:
        raise BadRequestError("File not uploaded")
    if len(files) > 1:
        raise BadRequestError("Upload exactly one file")

    upload = files[0]
    media_type = (upload.content_type or "").split(";")[0].strip().lower()
    if media_type != PDF_MEDIA_TYPE:
        logger.warning(f"Upload rejected: unsupported type {upload.content_type} from user {user_id}")
        raise UnsupportedMediaTypeError(details={"content_type": upload.content_type})

    max_bytes = get_settings().MAX_UPLOAD_BYTES
    contents = await upload.read(max_bytes + 1)
    if len(contents) > max_bytes:
        logger.warning(f"Upload rejected: larger than {max_bytes} bytes from user {user_id}")
        raise PayloadTooLargeError(
            f"File too large. Max size: {max_bytes // (1024 * 1024)} MB",
            details={"max_bytes": max_bytes},
        )
    if not contents:
        raise BadRequestError("Uploaded file is empty")

    logger.info(f"Upload accepted: {upload.filename} ({len(contents)} bytes) from user {user_id}")
    return contents


def parse_contract_id(contract_id: str) -> str:
    """Normalize a contract id, rejecting anything that is not a UUID."""
    try:
        return str(uuid.UUID(contract_id))
    except (ValueError, AttributeError):
        raise BadRequestError("Invalid contract ID")


@router.post("/detect-type", response_model=DetectTypeResponse)
async def detect_contract_type(
    current_user: User = Depends(get_current_user),
    contract: Optional[List[UploadFile]] = File(None),
    pipeline: ContractPipeline = Depends(get_contract_pipeline),
):
    """Detect the type of an uploaded PDF contract."""
    payload = await read_single_pdf(contract, current_user.id)
    detected_type = await pipeline.detect_type(current_user.id, payload)
    return DetectTypeResponse(detected_type=detected_type)


@router.post("/analyze", response_model=ContractAnalysisResponse)
async def analyze_contract(
    current_user: User = Depends(get_current_user),
    contract: Optional[List[UploadFile]] = File(None),
    contractType: Optional[str] = Form(None),
    pipeline: ContractPipeline = Depends(get_contract_pipeline),
    service: ContractAnalysisService = Depends(get_contract_service),
):
    """Analyze an uploaded PDF contract and store the result."""
    payload = await read_single_pdf(contract, current_user.id)
    contract_type = (contractType or "").strip()
    if not contract_type:
        raise BadRequestError("No contract type provided")
    if len(contract_type) > CONTRACT_TYPE_MAX_LENGTH:
        raise BadRequestError(
            "Contract type is too long",
            details={"max_length": CONTRACT_TYPE_MAX_LENGTH},
        )

    tier = AnalysisTier.PREMIUM if current_user.is_premium else AnalysisTier.FREE
    return await pipeline.analyze(current_user.id, payload, tier, contract_type, service)


@router.get("", response_model=List[ContractAnalysisResponse])
async def list_contracts(
    current_user: User = Depends(get_current_user),
    service: ContractAnalysisService = Depends(get_contract_service),
):
    """List the caller's contract analyses, newest first."""
    return await service.list_by_user(current_user.id)


@router.get("/{contract_id}", response_model=ContractAnalysisResponse)
async def get_contract(
    contract_id: str,
    current_user: User = Depends(get_current_user),
    service: ContractAnalysisService = Depends(get_contract_service),
):
    """Get one of the caller's contract analyses."""
    return await service.get_by_id(current_user.id, parse_contract_id(contract_id))
