"""
Job ledger persistence.

Stores job records as a JSON array in the user's home. Every append reads
the whole file and rewrites it.
"""

import json
import logging
import secrets
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from ai_cloud_doctor.config.loader import write_private_json
from ai_cloud_doctor.core.pricing import ModelPricing, calculate_cost
from ai_cloud_doctor.core.token_counter import TokenUsage

from .models import JobRecord, UsageSummary

logger = logging.getLogger(__name__)

JOBS_FILENAME = ".ai-cloud-doctor-jobs.json"


def default_jobs_path() -> Path:
    return Path.home() / JOBS_FILENAME


def generate_job_id() -> str:
    """Random 16 character hex identifier."""
    return secrets.token_hex(8)


def summarize_jobs(jobs: Sequence[JobRecord]) -> UsageSummary:
    """Compute ledger totals."""
    return UsageSummary(
        total_jobs=len(jobs),
        input_tokens=sum(job.input_tokens for job in jobs),
        output_tokens=sum(job.output_tokens for job in jobs),
        cached_tokens=sum(job.cached_tokens for job in jobs),
        total_tokens=sum(job.total_tokens for job in jobs),
        total_cost=sum(job.cost for job in jobs)
    )


class JobRepository:
    """Repository for the append-only job ledger.

    There is no locking: two processes appending at the same time can
    lose one of the records.
    """

    def __init__(self, path: Optional[Path] = None, pricing: Optional[ModelPricing] = None):
        """Initialize the repository.

        Args:
            path: Ledger file, defaults to ``~/.ai-cloud-doctor-jobs.json``
            pricing: Rates used when the provider reports no cost
        """
        self.path = Path(path) if path else default_jobs_path()
        self.pricing = pricing

    def read_all(self) -> List[JobRecord]:
        """All records in append order; a missing or corrupt file is empty."""
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError) as e:
            logger.debug("No usable job ledger at %s: %s", self.path, e)
            return []
        if not isinstance(data, list):
            return []

        jobs = []
        for entry in data:
            if not isinstance(entry, dict):
                continue
            try:
                jobs.append(JobRecord.from_dict(entry))
            except (TypeError, ValueError):
                logger.debug("Skipping malformed job entry: %r", entry)
        return jobs

    def append(
        self,
        name: str,
        input_tokens: int,
        output_tokens: int,
        cached_tokens: int = 0,
        cost: Optional[float] = None,
        model: Optional[str] = None
    ) -> str:
        """Record one job and return its generated id.

        When ``cost`` is not supplied it is computed from the token
        counters and the configured rates. A failed write is logged and
        ignored; the id is returned either way.
        """
        usage = TokenUsage(
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            cached_tokens=cached_tokens
        )
        if cost is None:
            cost = calculate_cost(usage, self.pricing)

        job = JobRecord(
            id=generate_job_id(),
            name=name,
            timestamp=datetime.now(timezone.utc).isoformat(),
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            total_tokens=usage.total_tokens,
            cost=cost,
            cached_tokens=cached_tokens,
            model=model
        )

        jobs = self.read_all()
        jobs.append(job)
        try:
            write_private_json(self.path, [j.to_dict() for j in jobs])
        except OSError as e:
            logger.debug("Could not write job ledger %s: %s", self.path, e)
        return job.id

    def summary(self) -> UsageSummary:
        return summarize_jobs(self.read_all())


def log_job(
    name: str,
    input_tokens: int,
    output_tokens: int,
    cached_tokens: int = 0,
    cost: Optional[float] = None,
    model: Optional[str] = None,
    path: Optional[Path] = None,
    pricing: Optional[ModelPricing] = None
) -> str:
    """Append one job to the ledger at ``path``."""
    return JobRepository(path, pricing).append(
        name, input_tokens, output_tokens, cached_tokens, cost, model
    )


def get_job_logs(path: Optional[Path] = None) -> List[JobRecord]:
    """Read every job from the ledger at ``path``."""
    return JobRepository(path).read_all()
