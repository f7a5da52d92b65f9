# ============================================================================
# src/nanopore_ingestion/core/pipeline.py
# ============================================================================
"""
Pipeline Coordinator

Main entry point for processing one submitted document.

Flow:
1. Extract text from the PDF            (ExtractionError -> failed)
2. Pattern extraction over the catalog
3. Work out which catalog fields are still missing
4. Model extraction for the missing fields (ExternalServiceError -> failed)
5. Fuse pattern and model candidates
6. Validate against the template rules   (never fails the job)
7. Embed and index the document          (ExternalServiceError -> failed)
8. Assemble the result

Processing is synchronous: the job moves pending -> processing ->
completed/failed inside a single call, so the status is a progress
indicator rather than a queue handle.
"""

from typing import Any, Dict, List, Optional
import asyncio
import logging
import time

from .context.enums import ProcessingStatus, ProcessingType
from .context.extracted_field import ExtractedField
from .context.job import ExtractionJob, ProcessingResult
from .fusion import FieldFusionEngine
from .job_store import JobRepository
from .template_repository import ProcessingTemplate, TemplateRepository
from ..config import BaseSettingsConfig, ThresholdSettings, base_settings, threshold_settings
from ..extractors.llm_extractor import LanguageModelFieldExtractor
from ..extractors.pattern_extractor import PatternFieldExtractor
from ..extractors.pdf_extractor import DocumentTextExtractor
from ..utils.exceptions import NanoporeIngestionError
from ..utils.logging import LogContext
from ..utils.metrics import PerformanceTracker
from ..validators.rule_validator import RuleValidator
from ..vector.embedding_indexer import EmbeddingIndexer


logger = logging.getLogger(__name__)

SCANNED_WARNING = "Document appears to be scanned; text may be incomplete (no OCR performed)"


class PipelineCoordinator:
    """
    Sequence the extraction components for a submitted document.

    All collaborators are injected so tests can swap the external services
    for fakes.
    """

    def __init__(
        self,
        text_extractor: DocumentTextExtractor,
        model_extractor: LanguageModelFieldExtractor,
        fusion: FieldFusionEngine,
        rule_validator: RuleValidator,
        indexer: EmbeddingIndexer,
        jobs: JobRepository,
        templates: TemplateRepository,
        tracker: Optional[PerformanceTracker] = None,
        settings: Optional[BaseSettingsConfig] = None,
        thresholds: Optional[ThresholdSettings] = None
    ):
        self.text_extractor = text_extractor
        self.model_extractor = model_extractor
        self.fusion = fusion
        self.rule_validator = rule_validator
        self.indexer = indexer
        self.jobs = jobs
        self.templates = templates
        self.tracker = tracker or PerformanceTracker()
        self.settings = settings or base_settings
        self.thresholds = thresholds or threshold_settings

        self._pattern_extractors: Dict[str, PatternFieldExtractor] = {}

    def pattern_extractor_for(self, template: ProcessingTemplate) -> PatternFieldExtractor:
        extractor = self._pattern_extractors.get(template.name)
        if extractor is None:
            extractor = PatternFieldExtractor(
                template.fields, template.pattern_scoring, self.thresholds
            )
            self._pattern_extractors[template.name] = extractor
        return extractor

    async def process_document(
        self,
        data: bytes,
        file_name: str,
        mime_type: str = "application/pdf",
        sample_id: Optional[str] = None,
        processing_type: ProcessingType = ProcessingType.PDF_EXTRACTION,
        template_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
        instruction: Optional[str] = None
    ) -> ExtractionJob:
        """
        Process one document end to end.

        Returns the job record in its terminal state. Pipeline errors are
        recorded on the job (status failed), not raised.

        Raises:
            ConfigurationError: unknown template (before any job is created)
        """
        template = self.templates.get(template_name or self.settings.DEFAULT_TEMPLATE)

        job = self.jobs.create(ExtractionJob(
            file_name=file_name,
            file_size=len(data),
            mime_type=mime_type,
            processing_type=processing_type,
            sample_id=sample_id,
            template=template.name,
            metadata=dict(metadata or {}),
        ))

        start = time.perf_counter()
        self.tracker.job_started()

        with LogContext(logger, job_id=job.id):
            logger.info(f"Processing {file_name} ({len(data)} bytes) with template {template.name}")
            job = self.jobs.update_status(job.id, ProcessingStatus.PROCESSING, progress=0)

            try:
                result = await self._run(job, data, template, instruction, start)
            except NanoporeIngestionError as e:
                duration = time.perf_counter() - start
                logger.error(f"Job failed after {duration:.2f}s: {e}")
                self.tracker.record_error(type(e).__name__)
                self.tracker.job_finished(job.processing_type.value, "failed", duration)
                return self.jobs.update_error(job.id, str(e))
            except Exception as e:
                duration = time.perf_counter() - start
                logger.exception(f"Unexpected error processing {file_name}")
                self.tracker.record_error("unexpected")
                self.tracker.job_finished(job.processing_type.value, "failed", duration)
                self.jobs.update_error(job.id, f"Unexpected error: {e}")
                raise

            duration = time.perf_counter() - start
            self.tracker.record_extraction(len(result.extracted_fields), result.confidence)
            self.tracker.job_finished(job.processing_type.value, "completed", duration)
            logger.info(
                f"Job completed in {duration:.2f}s: {len(result.extracted_fields)} fields, "
                f"confidence={result.confidence:.2f}, validation={result.validation_score:.2f}"
            )
            return self.jobs.update_result(job.id, result)

    async def _run(
        self,
        job: ExtractionJob,
        data: bytes,
        template: ProcessingTemplate,
        instruction: Optional[str],
        start: float
    ) -> ProcessingResult:
        with self.tracker.time_stage("text_extraction"):
            loop = asyncio.get_running_loop()
            document = await loop.run_in_executor(None, self.text_extractor.extract, data)

        with self.tracker.time_stage("pattern_extraction"):
            pattern_fields = self.pattern_extractor_for(template).extract_fields(document.text)

        found = {f.field_name for f in pattern_fields}
        missing = [name for name in template.field_names if name not in found]

        model_fields: List[ExtractedField] = []
        if missing:
            with self.tracker.time_stage("model_extraction"):
                model_fields = await self.model_extractor.extract(
                    document.text,
                    target_fields=missing,
                    instruction=instruction or template.extraction_prompt,
                )
        logger.debug(
            f"Pattern found {len(pattern_fields)} fields, model asked for {len(missing)}, "
            f"returned {len(model_fields)}"
        )

        fused = self.fusion.fuse(pattern_fields, model_fields)

        with self.tracker.time_stage("validation"):
            validation = self.rule_validator.validate(fused.fields, template.validation_rules)

        with self.tracker.time_stage("indexing"):
            record = await self.indexer.index(
                job.id,
                document.text,
                fused.fields,
                metadata={
                    **job.metadata,
                    "sample_id": job.sample_id,
                    "file_name": job.file_name,
                    "file_size": job.file_size,
                    "mime_type": job.mime_type,
                    "processing_type": job.processing_type.value,
                    "template": template.name,
                    "page_count": document.page_count,
                },
            )

        warnings = list(document.warnings)
        if document.is_scanned:
            warnings.append(SCANNED_WARNING)
        warnings.extend(self._low_confidence_warnings(fused.fields))
        warnings.extend(validation.warning_messages)

        return ProcessingResult(
            extracted_fields=fused.fields,
            confidence=fused.confidence,
            processing_time_ms=(time.perf_counter() - start) * 1000,
            pages_processed=document.page_count,
            validation_score=validation.score,
            suggestions=list(validation.suggestions),
            warnings=warnings,
            errors=validation.error_messages,
            is_scanned=document.is_scanned,
            vector_id=record.id,
        )

    def _low_confidence_warnings(self, fields: List[ExtractedField]) -> List[str]:
        threshold = self.thresholds.LOW_CONFIDENCE_WARNING
        return [
            f"Low confidence for field '{f.field_name}': {f.confidence:.2f}"
            for f in fields
            if f.confidence < threshold
        ]
