# ============================================================================
# api/main.py
# ============================================================================
"""
FastAPI Backend for the Nanopore Ingestion Engine

REST API for sample-form processing, field extraction, validation,
similarity search and retrieval-augmented answers.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from nanopore_ingestion.config import base_settings, logging_settings
from nanopore_ingestion.core.context.enums import ProcessingStatus, ProcessingType
from nanopore_ingestion.core.service import ProcessingService, build_service
from nanopore_ingestion.utils.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    ExtractionError,
    InvalidJobTransitionError,
    JobNotFoundError,
)
from nanopore_ingestion.utils.logging import setup_logging
from nanopore_ingestion.validators.rules import ValidationRule

logger = logging.getLogger(__name__)


# ============================================================================
# Models
# ============================================================================

class TextExtractionRequest(BaseModel):
    text: str = Field(..., min_length=1)
    fields: Optional[List[str]] = None
    instruction: Optional[str] = None
    template: Optional[str] = None


class SimilaritySearchRequest(BaseModel):
    query: str = Field(..., min_length=1)
    limit: int = Field(default=10, ge=1, le=100)
    threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    filters: Optional[Dict[str, Any]] = None


class RuleModel(BaseModel):
    field_name: str
    required: bool = False
    type: str = "string"
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    min_value: Optional[float] = None
    max_value: Optional[float] = None
    exclusive_min: bool = False
    allowed_values: Optional[List[str]] = None
    pattern: Optional[str] = None


class FormValidationRequest(BaseModel):
    fields: Dict[str, Any]
    rules: Optional[List[RuleModel]] = None
    template: Optional[str] = None


class RAGRequest(BaseModel):
    question: str = Field(..., min_length=1)
    context: Optional[str] = None
    limit: int = Field(default=5, ge=1, le=50)
    threshold: float = Field(default=0.7, ge=0.0, le=1.0)
    filters: Optional[Dict[str, Any]] = None


# ============================================================================
# App
# ============================================================================

def get_service(request: Request) -> ProcessingService:
    return request.app.state.service


def create_app(service: Optional[ProcessingService] = None) -> FastAPI:
    """
    Build the API.

    Args:
        service: Pre-built service (tests pass one wired with fakes). When
            omitted, the production service is built at startup.
    """

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        setup_logging(
            level=logging_settings.LOG_LEVEL,
            log_file=logging_settings.LOG_FILE,
            format_json=logging_settings.LOG_JSON,
        )
        owns_service = app.state.service is None
        if owns_service:
            app.state.service = build_service()
            logger.info("Processing service started")
        yield
        if owns_service:
            await app.state.service.close()

    app = FastAPI(
        title="Nanopore Ingestion Engine API",
        description="Extract, validate and search nanopore sample submission forms",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.service = service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    _register_error_handlers(app)
    _register_routes(app)
    return app


def _register_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(ExtractionError)
    async def extraction_error(request: Request, exc: ExtractionError):
        return JSONResponse(status_code=422, content={"detail": str(exc)})

    @app.exception_handler(ExternalServiceError)
    async def external_service_error(request: Request, exc: ExternalServiceError):
        logger.error(f"{exc.service} unavailable: {exc}")
        return JSONResponse(
            status_code=502,
            content={"detail": str(exc), "service": exc.service},
        )

    @app.exception_handler(JobNotFoundError)
    async def job_not_found(request: Request, exc: JobNotFoundError):
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    @app.exception_handler(ConfigurationError)
    async def configuration_error(request: Request, exc: ConfigurationError):
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    @app.exception_handler(InvalidJobTransitionError)
    async def invalid_transition(request: Request, exc: InvalidJobTransitionError):
        return JSONResponse(status_code=409, content={"detail": str(exc)})


# ============================================================================
# Endpoints
# ============================================================================

def _register_routes(app: FastAPI) -> None:

    @app.get("/")
    async def root():
        return {"status": "ok", "service": "Nanopore Ingestion Engine API"}

    @app.post("/api/process/pdf")
    async def process_pdf(
        file: UploadFile = File(...),
        sample_id: Optional[str] = Form(None),
        processing_type: ProcessingType = Form(ProcessingType.PDF_EXTRACTION),
        template: Optional[str] = Form(None),
        service: ProcessingService = Depends(get_service),
    ):
        """Upload a PDF sample form and run the full extraction pipeline."""
        file_name = file.filename or "upload.pdf"
        if file.content_type != "application/pdf" and not file_name.lower().endswith(".pdf"):
            raise HTTPException(status_code=400, detail="Only PDF files are allowed")

        data = await file.read()
        if len(data) > base_settings.MAX_UPLOAD_BYTES:
            raise HTTPException(
                status_code=413,
                detail=f"File exceeds {base_settings.MAX_UPLOAD_BYTES} bytes"
            )
        if not data:
            raise HTTPException(status_code=400, detail="Uploaded file is empty")

        job = await service.process_document(
            data,
            file_name=file_name,
            mime_type="application/pdf",
            sample_id=sample_id,
            processing_type=processing_type,
            template=template,
        )
        return {
            "success": job.status == ProcessingStatus.COMPLETED,
            "job": job.to_dict(),
        }

    @app.post("/api/extract/text")
    async def extract_text(
        request: TextExtractionRequest,
        service: ProcessingService = Depends(get_service),
    ):
        result = await service.extract_from_text(
            request.text,
            fields=request.fields,
            instruction=request.instruction,
            template=request.template,
        )
        return {"success": True, "data": result}

    @app.post("/api/search/similar")
    async def search_similar(
        request: SimilaritySearchRequest,
        service: ProcessingService = Depends(get_service),
    ):
        hits = await service.search_similar(
            request.query,
            limit=request.limit,
            threshold=request.threshold,
            filters=request.filters,
        )
        return {
            "success": True,
            "data": {
                "results": [
                    {"id": hit.id, "score": hit.score, "payload": hit.payload}
                    for hit in hits
                ],
                "count": len(hits),
            },
        }

    @app.post("/api/validate/form")
    async def validate_form(
        request: FormValidationRequest,
        service: ProcessingService = Depends(get_service),
    ):
        rules = None
        if request.rules is not None:
            rules = [ValidationRule.from_dict(r.model_dump()) for r in request.rules]

        result = await service.validate_form(request.fields, rules=rules, template=request.template)
        return {"success": True, "data": result.to_dict()}

    @app.post("/api/rag/answer")
    async def rag_answer(
        request: RAGRequest,
        service: ProcessingService = Depends(get_service),
    ):
        answer = await service.answer_question(
            request.question,
            context=request.context,
            limit=request.limit,
            threshold=request.threshold,
            filters=request.filters,
        )
        return {"success": True, "data": answer.to_dict()}

    # Declared before /api/jobs/{job_id} so "stats" is not taken as an id
    @app.get("/api/jobs/stats")
    async def job_statistics(service: ProcessingService = Depends(get_service)):
        return {"success": True, "data": service.get_job_statistics()}

    @app.get("/api/jobs/sample/{sample_id}")
    async def jobs_for_sample(sample_id: str, service: ProcessingService = Depends(get_service)):
        jobs = service.get_jobs_by_sample(sample_id)
        return {"success": True, "data": [job.to_dict() for job in jobs]}

    @app.get("/api/jobs/{job_id}")
    async def get_job(job_id: str, service: ProcessingService = Depends(get_service)):
        return {"success": True, "data": service.get_job(job_id).to_dict()}

    @app.get("/api/jobs")
    async def list_jobs(
        status: Optional[ProcessingStatus] = None,
        processing_type: Optional[ProcessingType] = None,
        limit: int = Query(default=50, ge=1, le=500),
        offset: int = Query(default=0, ge=0),
        service: ProcessingService = Depends(get_service),
    ):
        jobs = service.list_jobs(limit, offset, status, processing_type)
        return {
            "success": True,
            "data": [job.to_dict() for job in jobs],
            "limit": limit,
            "offset": offset,
        }

    @app.get("/api/stats")
    async def statistics(service: ProcessingService = Depends(get_service)):
        return {"success": True, "data": await service.get_statistics()}

    @app.get("/api/health")
    async def health(service: ProcessingService = Depends(get_service)):
        """Health check for monitoring: 503 when a dependency is down."""
        report = await service.check_health()
        status_code = 200 if report["status"] == "healthy" else 503
        return JSONResponse(status_code=status_code, content=report)


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("api.main:app", host="0.0.0.0", port=8000, reload=False)
