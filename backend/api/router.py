from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_extraction_service
from config import settings
from models.requests import ExtractRequest
from models.responses import DomainExtractionResponse, UploadExtractionResponse, ValidationResponse
from models.schemas.batch import BatchExtractionResult, ServiceStatus
from services import document_parser
from services.extraction_service import ExtractionService

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)

DOMAIN_ROUTES = {
    "basic_info": "extract_basic_info",
    "education": "extract_education",
    "experience": "extract_experience",
    "projects": "extract_projects",
    "skills": "extract_skills",
}


def _require_text(text: str) -> str:
    if not text.strip():
        raise HTTPException(status_code=400, detail="Resume text is empty")
    return text


@router.get("/health")
async def health():
    return {
        "status": "ok",
        "ai_configured": bool(settings.deepseek_api_key),
        "ai_enabled": settings.enable_ai_extraction,
        "extraction_mode": settings.extraction_mode,
    }


@router.get("/status", response_model=ServiceStatus)
async def status(service: ExtractionService = Depends(get_extraction_service)):
    return await service.get_service_status()


@router.post("/extract", response_model=BatchExtractionResult)
@limiter.limit("10/minute")
async def extract(
    request: Request,
    body: ExtractRequest,
    service: ExtractionService = Depends(get_extraction_service),
):
    return await service.extract_all(_require_text(body.text), body.resume_id)


@router.post("/extract/upload", response_model=UploadExtractionResponse)
@limiter.limit("10/minute")
async def extract_upload(
    request: Request,
    resume_file: UploadFile = File(...),
    resume_id: str | None = Form(None),
    service: ExtractionService = Depends(get_extraction_service),
):
    filename = resume_file.filename or ""
    if not filename.lower().endswith(document_parser.SUPPORTED_EXTENSIONS):
        raise HTTPException(status_code=400, detail="Only PDF, TXT and MD files are accepted")

    # Read and validate size
    content = await resume_file.read()
    max_bytes = settings.max_upload_size_mb * 1024 * 1024
    if len(content) > max_bytes:
        raise HTTPException(
            status_code=400,
            detail=f"File too large. Max size: {settings.max_upload_size_mb}MB",
        )

    try:
        resume_text = document_parser.extract_text(content, filename)
    except Exception:
        raise HTTPException(status_code=400, detail="Could not read the uploaded file")

    if not resume_text.strip():
        raise HTTPException(status_code=400, detail="No text could be extracted from the file")

    result = await service.extract_all(resume_text, resume_id)
    return UploadExtractionResponse(filename=filename, text_length=len(resume_text), result=result)


@router.post("/extract/validate", response_model=ValidationResponse)
@limiter.limit("10/minute")
async def extract_validate(
    request: Request,
    body: ExtractRequest,
    service: ExtractionService = Depends(get_extraction_service),
):
    text = _require_text(body.text)
    batch = await service.extract_all(text, body.resume_id)
    return ValidationResponse(
        validation=service.validate_extraction_results(batch),
        stats=service.get_extraction_stats(batch, text),
    )


@router.post("/extract/{domain}", response_model=DomainExtractionResponse)
@limiter.limit("10/minute")
async def extract_domain(
    request: Request,
    domain: str,
    body: ExtractRequest,
    service: ExtractionService = Depends(get_extraction_service),
):
    method = DOMAIN_ROUTES.get(domain)
    if method is None:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown domain '{domain}'. Expected one of: {', '.join(DOMAIN_ROUTES)}",
        )
    data = await getattr(service, method)(_require_text(body.text))
    return DomainExtractionResponse(domain=domain, data=data)
