# ============================================================================
# src/nanopore_ingestion/core/service.py
# ============================================================================
"""
Processing Service

Single façade over the extraction engine. Components are constructed once
and passed in explicitly; build_service() wires the production stack from
settings.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
import logging
import time

from .context.enums import FieldSource, ProcessingStatus, ProcessingType
from .context.extracted_field import ExtractedField
from .context.job import ExtractionJob
from .confidence import confidence_level_for, mean_confidence
from .fusion import FieldFusionEngine
from .job_store import JobRepository, SQLiteJobRepository
from .pipeline import PipelineCoordinator
from .template_repository import TemplateRepository
from ..config import (
    BaseSettingsConfig,
    OllamaSettings,
    ThresholdSettings,
    VectorSettings,
    base_settings,
    ollama_settings,
    threshold_settings,
    vector_settings,
)
from ..extractors.llm_extractor import LanguageModelFieldExtractor
from ..extractors.pdf_extractor import DocumentTextExtractor
from ..llm.base import BaseLLMClient
from ..llm.ollama_client import OllamaClient
from ..utils.exceptions import ValidationError
from ..utils.metrics import PerformanceTracker
from ..validators.ai_validator import FORM_FIELD, LanguageModelValidator
from ..validators.rule_validator import RuleValidator
from ..validators.rules import ValidationResult, ValidationRule
from ..vector.base import BaseVectorStore, SearchHit
from ..vector.embedding_indexer import EmbeddingIndexer
from ..vector.qdrant_store import QdrantVectorStore
from ..vector.retrieval import RAGAnswer, RetrievalAnswerer


logger = logging.getLogger(__name__)


class ProcessingService:
    """
    Entry point used by the HTTP layer.

    Args:
        client: Text-generation / embedding client
        store: Vector store
        jobs: Job repository
        templates: Template repository
    """

    def __init__(
        self,
        client: BaseLLMClient,
        store: BaseVectorStore,
        jobs: JobRepository,
        templates: TemplateRepository,
        settings: Optional[BaseSettingsConfig] = None,
        ollama_config: Optional[OllamaSettings] = None,
        vector_config: Optional[VectorSettings] = None,
        thresholds: Optional[ThresholdSettings] = None
    ):
        self.client = client
        self.store = store
        self.jobs = jobs
        self.templates = templates
        self.settings = settings or base_settings
        thresholds = thresholds or threshold_settings

        self.tracker = PerformanceTracker()
        self.text_extractor = DocumentTextExtractor(thresholds)
        self.model_extractor = LanguageModelFieldExtractor(client, settings=ollama_config)
        self.rule_validator = RuleValidator(thresholds.VALIDATION_SUGGESTION_THRESHOLD)
        self.model_validator = LanguageModelValidator(client, ollama_config)
        self.indexer = EmbeddingIndexer(client, store)
        self.answerer = RetrievalAnswerer(client, store, ollama_config, vector_config)

        self.pipeline = PipelineCoordinator(
            text_extractor=self.text_extractor,
            model_extractor=self.model_extractor,
            fusion=FieldFusionEngine(),
            rule_validator=self.rule_validator,
            indexer=self.indexer,
            jobs=jobs,
            templates=templates,
            tracker=self.tracker,
            settings=self.settings,
            thresholds=thresholds,
        )

    # ------------------------------------------------------------------
    # Extraction
    # ------------------------------------------------------------------
    async def process_document(
        self,
        data: bytes,
        file_name: str,
        mime_type: str = "application/pdf",
        sample_id: Optional[str] = None,
        processing_type: ProcessingType = ProcessingType.PDF_EXTRACTION,
        template: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> ExtractionJob:
        return await self.pipeline.process_document(
            data,
            file_name=file_name,
            mime_type=mime_type,
            sample_id=sample_id,
            processing_type=processing_type,
            template_name=template,
            metadata=metadata,
        )

    async def extract_from_text(
        self,
        text: str,
        fields: Optional[List[str]] = None,
        instruction: Optional[str] = None,
        template: Optional[str] = None
    ) -> Dict[str, Any]:
        """Model extraction on raw text, without creating a job."""
        start = time.perf_counter()
        processing_template = self.templates.get(template or self.settings.DEFAULT_TEMPLATE)

        extracted = await self.model_extractor.extract(
            text,
            target_fields=fields or processing_template.field_names,
            instruction=instruction or processing_template.extraction_prompt,
        )
        confidence = mean_confidence(f.confidence for f in extracted)

        return {
            "extracted_fields": [f.to_dict() for f in extracted],
            "confidence": confidence,
            "confidence_level": confidence_level_for(confidence).value,
            "processing_time_ms": (time.perf_counter() - start) * 1000,
        }

    # ------------------------------------------------------------------
    # Retrieval
    # ------------------------------------------------------------------
    async def search_similar(
        self,
        query: str,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> List[SearchHit]:
        return await self.answerer.retrieve(query, limit, threshold, filters)

    async def answer_question(
        self,
        question: str,
        context: Optional[str] = None,
        limit: Optional[int] = None,
        threshold: Optional[float] = None,
        filters: Optional[Dict[str, Any]] = None
    ) -> RAGAnswer:
        return await self.answerer.answer(question, context, limit, threshold, filters)

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    async def validate_form(
        self,
        fields: Dict[str, Any],
        rules: Optional[List[ValidationRule]] = None,
        template: Optional[str] = None
    ) -> ValidationResult:
        """
        Rule validation combined with model review.

        Valid only when both agree; score is the mean of the two.
        Model suggestions are reported as warnings.
        """
        if rules is None:
            rules = self.templates.get_rules(template or self.settings.DEFAULT_TEMPLATE)

        extracted = [
            ExtractedField(field_name=name, value=str(value), confidence=1.0, source=FieldSource.PATTERN)
            for name, value in fields.items()
            if value is not None
        ]
        rule_result = self.rule_validator.validate(extracted, rules)
        model_result = await self.model_validator.validate(fields, rules)

        return ValidationResult(
            is_valid=rule_result.is_valid and model_result.is_valid,
            score=(rule_result.score + model_result.score) / 2,
            errors=rule_result.errors + model_result.errors,
            warnings=rule_result.warnings + [
                ValidationError(s, field_name=FORM_FIELD, severity="warning")
                for s in model_result.suggestions
            ],
            suggestions=list(rule_result.suggestions),
        )

    # ------------------------------------------------------------------
    # Jobs
    # ------------------------------------------------------------------
    def get_job(self, job_id: str) -> ExtractionJob:
        return self.jobs.get_by_id(job_id)

    def get_jobs_by_sample(self, sample_id: str) -> List[ExtractionJob]:
        return self.jobs.get_by_sample(sample_id)

    def list_jobs(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[ProcessingStatus] = None,
        processing_type: Optional[ProcessingType] = None
    ) -> List[ExtractionJob]:
        return self.jobs.list_jobs(limit, offset, status, processing_type)

    def get_job_statistics(self) -> Dict[str, Any]:
        return self.jobs.get_statistics()

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    async def check_health(self) -> Dict[str, Any]:
        llm_health = await self.client.health_check()
        vector_health = await self.store.health_check()
        healthy = llm_health["healthy"] and vector_health["healthy"]
        return {
            "status": "healthy" if healthy else "unhealthy",
            "services": {
                "ollama": llm_health,
                "qdrant": vector_health,
            },
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

    async def get_statistics(self) -> Dict[str, Any]:
        """
        Raises:
            ExternalServiceError: vector store statistics unavailable
        """
        return {
            "vector_store": await self.store.stats(),
            "jobs": self.jobs.get_statistics(),
            "processing": self.tracker.get_summary(),
            "llm": self.client.get_statistics(),
            "health": await self.check_health(),
        }

    async def close(self) -> None:
        await self.client.close()
        await self.store.close()


def build_service(
    settings: Optional[BaseSettingsConfig] = None,
    ollama_config: Optional[OllamaSettings] = None,
    vector_config: Optional[VectorSettings] = None,
    thresholds: Optional[ThresholdSettings] = None
) -> ProcessingService:
    """Wire the production stack: Ollama, Qdrant, SQLite job store."""
    settings = settings or base_settings
    settings.create_directories()

    return ProcessingService(
        client=OllamaClient(settings=ollama_config),
        store=QdrantVectorStore(vector_config),
        jobs=SQLiteJobRepository(settings.JOB_DB_PATH),
        templates=TemplateRepository(settings=settings),
        settings=settings,
        ollama_config=ollama_config,
        vector_config=vector_config,
        thresholds=thresholds,
    )
