# ============================================================================
# src/nanopore_ingestion/core/job_store.py
# ============================================================================
"""
Job Repository

Stores extraction job records. Two backends:
- InMemoryJobRepository: process-local, for tests and single-shot runs
- SQLiteJobRepository: raw sqlite3, full job serialized as JSON

All status changes go through ExtractionJob.transition, so a terminal job
can never be moved again regardless of backend.
"""

from abc import ABC, abstractmethod
from collections import Counter
from pathlib import Path
from typing import Any, Dict, List, Optional
import json
import logging
import sqlite3
import threading

from .confidence import mean_confidence
from .context.enums import ProcessingStatus, ProcessingType
from .context.job import ExtractionJob, ProcessingResult
from ..utils.exceptions import JobNotFoundError


logger = logging.getLogger(__name__)


class JobRepository(ABC):
    """
    Job persistence interface.

    Backends implement storage (_save, get_by_id, _query, delete); status,
    result and error updates are shared.
    """

    @abstractmethod
    def _save(self, job: ExtractionJob) -> None:
        pass

    @abstractmethod
    def get_by_id(self, job_id: str) -> ExtractionJob:
        """
        Raises:
            JobNotFoundError: no job with this id
        """
        pass

    @abstractmethod
    def _query(
        self,
        sample_id: Optional[str] = None,
        status: Optional[ProcessingStatus] = None,
        processing_type: Optional[ProcessingType] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[ExtractionJob]:
        """Jobs matching all given filters, newest first."""
        pass

    @abstractmethod
    def delete(self, job_id: str) -> bool:
        pass

    def create(self, job: ExtractionJob) -> ExtractionJob:
        self._save(job)
        logger.info(f"Created job {job.id} for {job.file_name}")
        return job

    def get_by_sample(self, sample_id: str) -> List[ExtractionJob]:
        return self._query(sample_id=sample_id)

    def get_by_status(self, status: ProcessingStatus) -> List[ExtractionJob]:
        return self._query(status=ProcessingStatus(status))

    def get_by_type(self, processing_type: ProcessingType) -> List[ExtractionJob]:
        return self._query(processing_type=ProcessingType(processing_type))

    def list_jobs(
        self,
        limit: int = 50,
        offset: int = 0,
        status: Optional[ProcessingStatus] = None,
        processing_type: Optional[ProcessingType] = None
    ) -> List[ExtractionJob]:
        return self._query(
            status=ProcessingStatus(status) if status else None,
            processing_type=ProcessingType(processing_type) if processing_type else None,
            limit=limit,
            offset=offset,
        )

    def update_status(
        self,
        job_id: str,
        status: ProcessingStatus,
        progress: Optional[int] = None
    ) -> ExtractionJob:
        job = self.get_by_id(job_id)
        job.transition(status, progress)
        self._save(job)
        return job

    def update_result(self, job_id: str, result: ProcessingResult) -> ExtractionJob:
        job = self.get_by_id(job_id)
        job.complete(result)
        self._save(job)
        return job

    def update_error(self, job_id: str, error: str) -> ExtractionJob:
        job = self.get_by_id(job_id)
        job.fail(error)
        self._save(job)
        return job

    def get_statistics(self) -> Dict[str, Any]:
        jobs = self._query()
        by_status = Counter(job.status.value for job in jobs)
        by_type = Counter(job.processing_type.value for job in jobs)
        confidences = [job.result.confidence for job in jobs if job.result is not None]

        return {
            "total": len(jobs),
            "by_status": {s.value: by_status.get(s.value, 0) for s in ProcessingStatus},
            "by_type": dict(by_type),
            "average_confidence": mean_confidence(confidences),
        }


class InMemoryJobRepository(JobRepository):
    """Dict-backed repository. Records are stored serialized, like SQLite."""

    def __init__(self):
        self._jobs: Dict[str, Dict[str, Any]] = {}
        self._lock = threading.Lock()

    def _save(self, job: ExtractionJob) -> None:
        with self._lock:
            self._jobs[job.id] = job.to_dict()

    def get_by_id(self, job_id: str) -> ExtractionJob:
        with self._lock:
            data = self._jobs.get(job_id)
        if data is None:
            raise JobNotFoundError(job_id)
        return ExtractionJob.from_dict(data)

    def _query(
        self,
        sample_id: Optional[str] = None,
        status: Optional[ProcessingStatus] = None,
        processing_type: Optional[ProcessingType] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[ExtractionJob]:
        with self._lock:
            records = list(self._jobs.values())

        jobs = [ExtractionJob.from_dict(r) for r in records]
        if sample_id is not None:
            jobs = [j for j in jobs if j.sample_id == sample_id]
        if status is not None:
            jobs = [j for j in jobs if j.status == status]
        if processing_type is not None:
            jobs = [j for j in jobs if j.processing_type == processing_type]

        jobs.sort(key=lambda j: j.created_at, reverse=True)
        end = offset + limit if limit is not None else None
        return jobs[offset:end]

    def delete(self, job_id: str) -> bool:
        with self._lock:
            return self._jobs.pop(job_id, None) is not None


class SQLiteJobRepository(JobRepository):
    """
    SQLite-backed repository.

    Indexed columns for the lookups; the full job dict lives in job_data.
    """

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)
        self._init_database()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(str(self.db_path))

    def _init_database(self):
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        cur = conn.cursor()

        cur.execute("""
            CREATE TABLE IF NOT EXISTS extraction_jobs (
                id              TEXT PRIMARY KEY,
                sample_id       TEXT,
                file_name       TEXT NOT NULL,
                processing_type TEXT NOT NULL,
                status          TEXT NOT NULL,
                confidence      REAL,
                created_at      TEXT NOT NULL,
                updated_at      TEXT NOT NULL,
                -- Full job record as JSON
                job_data        TEXT NOT NULL
            )
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_jobs_sample
            ON extraction_jobs (sample_id)
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_jobs_status
            ON extraction_jobs (status)
        """)
        cur.execute("""
            CREATE INDEX IF NOT EXISTS idx_jobs_created
            ON extraction_jobs (created_at DESC)
        """)

        conn.commit()
        conn.close()
        logger.info(f"Job store initialized: {self.db_path}")

    def _save(self, job: ExtractionJob) -> None:
        conn = self._connect()
        cur = conn.cursor()
        cur.execute("""
            INSERT OR REPLACE INTO extraction_jobs
                (id, sample_id, file_name, processing_type, status,
                 confidence, created_at, updated_at, job_data)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?)
        """, (
            job.id,
            job.sample_id,
            job.file_name,
            job.processing_type.value,
            job.status.value,
            job.result.confidence if job.result else None,
            job.created_at.isoformat(),
            job.updated_at.isoformat(),
            json.dumps(job.to_dict(), default=str),
        ))
        conn.commit()
        conn.close()

    def get_by_id(self, job_id: str) -> ExtractionJob:
        conn = self._connect()
        cur = conn.cursor()
        cur.execute("SELECT job_data FROM extraction_jobs WHERE id = ?", (job_id,))
        row = cur.fetchone()
        conn.close()
        if row is None:
            raise JobNotFoundError(job_id)
        return ExtractionJob.from_dict(json.loads(row[0]))

    def _query(
        self,
        sample_id: Optional[str] = None,
        status: Optional[ProcessingStatus] = None,
        processing_type: Optional[ProcessingType] = None,
        limit: Optional[int] = None,
        offset: int = 0
    ) -> List[ExtractionJob]:
        query = "SELECT job_data FROM extraction_jobs WHERE 1=1"
        params: list = []

        if sample_id is not None:
            query += " AND sample_id = ?"
            params.append(sample_id)
        if status is not None:
            query += " AND status = ?"
            params.append(status.value)
        if processing_type is not None:
            query += " AND processing_type = ?"
            params.append(processing_type.value)

        query += " ORDER BY created_at DESC"
        if limit is not None:
            query += " LIMIT ? OFFSET ?"
            params.extend([limit, offset])
        elif offset:
            query += " LIMIT -1 OFFSET ?"
            params.append(offset)

        conn = self._connect()
        cur = conn.cursor()
        cur.execute(query, params)
        rows = cur.fetchall()
        conn.close()

        return [ExtractionJob.from_dict(json.loads(r[0])) for r in rows]

    def delete(self, job_id: str) -> bool:
        conn = self._connect()
        cur = conn.cursor()
        cur.execute("DELETE FROM extraction_jobs WHERE id = ?", (job_id,))
        deleted = cur.rowcount > 0
        conn.commit()
        conn.close()
        return deleted
