from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Optional

from storefront.constants import BATCH_JOB_CREATED
from storefront.db import sqlite as store
from storefront.db.sqlite import Database
from storefront.errors import NotFoundError, ValidationError
from storefront.models import AuthUser

logger = logging.getLogger(__name__)


class BatchJobStrategy:
    """Turns a validated batch-job request into the row to persist."""

    batch_type = ""

    def prepare_batch_job_for_processing(self, data: Dict[str, Any], user: AuthUser) -> Dict[str, Any]:
        raise NotImplementedError


class ProductExportStrategy(BatchJobStrategy):
    batch_type = "product-export"

    DEFAULT_LIMIT = 50

    def prepare_batch_job_for_processing(self, data: Dict[str, Any], user: AuthUser) -> Dict[str, Any]:
        ctx = dict(data.get("context") or {})
        limit = ctx.get("limit", self.DEFAULT_LIMIT)
        offset = ctx.get("offset", 0)
        if isinstance(limit, bool) or not isinstance(limit, int) or limit < 1:
            raise ValidationError("context.limit must be a positive integer")
        if isinstance(offset, bool) or not isinstance(offset, int) or offset < 0:
            raise ValidationError("context.offset must be a non-negative integer")

        ctx["list_config"] = {"skip": offset, "take": limit, "order": {"created_at": "DESC"}}
        return {
            "type": self.batch_type,
            "context": ctx,
            "dry_run": bool(data.get("dry_run")),
        }


class BatchJobService:
    def __init__(self, db: Database, strategies: Iterable[BatchJobStrategy]) -> None:
        self.db = db
        self.strategies = {s.batch_type: s for s in strategies}

    def resolve_strategy(self, batch_type: str) -> BatchJobStrategy:
        strategy: Optional[BatchJobStrategy] = self.strategies.get(batch_type)
        if strategy is None:
            raise ValidationError(f"Unknown batch job type {batch_type}")
        return strategy

    def create(self, data: Dict[str, Any], user: AuthUser) -> Dict[str, Any]:
        strategy = self.resolve_strategy(data["type"])
        to_create = strategy.prepare_batch_job_for_processing(data, user)
        to_create["created_by"] = user.id
        to_create["status"] = BATCH_JOB_CREATED

        with self.db.transaction() as conn:
            batch_job_id = store.insert_batch_job(conn, to_create)
            batch_job = store.get_batch_job(conn, batch_job_id)
        logger.info("batch job %s (%s) created by %s", batch_job_id, data["type"], user.id)
        return batch_job

    def retrieve(self, batch_job_id: str) -> Dict[str, Any]:
        with self.db.session() as conn:
            batch_job = store.get_batch_job(conn, batch_job_id)
        if not batch_job:
            raise NotFoundError(f"Batch job with id {batch_job_id} was not found")
        return batch_job
