"""Per-store make-live pipeline and batch driver.

Steps for one store:
1. Parse location-master.csv into ordered observations
2. Resolve block names to fixture types
3. Fetch the store's latest fixture records
4. Reconcile (new-store or update-store path)
5. Write fixture ids back into the export
6. Persist final fixtures and STORAGE moves in one transaction

Any failure aborts that store before anything is committed. The batch
driver decides whether to continue with the next store.
"""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable, Iterable
from contextlib import AbstractAsyncContextManager

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from fixtureid.config import IngestConfig, get_config
from fixtureid.core.logging import batch_context, store_context
from fixtureid.db.connection import get_session
from fixtureid.db.repository import FixtureRepository
from fixtureid.ingestion.block_types import FixtureTypeResolver
from fixtureid.ingestion.location_master import parse_location_master, write_fixture_ids
from fixtureid.pipeline.types import BatchSummary, RunStatus, StoreJob, StoreRunResult
from fixtureid.reconcile.orchestrator import ReconciliationEngine

logger = structlog.get_logger(__name__)

ResolverProvider = Callable[[], Awaitable[FixtureTypeResolver]]
SessionFactory = Callable[[], AbstractAsyncContextManager[AsyncSession]]


class StorePipeline:
    """Runs fixture-id assignment for one store at a time."""

    def __init__(
        self,
        resolver_provider: ResolverProvider,
        session_factory: SessionFactory = get_session,
        engine: ReconciliationEngine | None = None,
        ingest: IngestConfig | None = None,
    ) -> None:
        """Initialize pipeline.

        Args:
            resolver_provider: Async callable returning the block-type resolver
            session_factory: Async context manager yielding a transactional session
            engine: Reconciliation engine (default settings if omitted)
            ingest: Export column settings (default: MIN_COLUMNS / FIXTURE_ID_COLUMN)
        """
        self.resolver_provider = resolver_provider
        self.session_factory = session_factory
        self.engine = engine or ReconciliationEngine()
        self.ingest = ingest or get_config().ingest

    async def run(self, store_id: str, csv_text: str, dry_run: bool = False) -> StoreRunResult:
        """Execute the pipeline for one store.

        Returns:
            StoreRunResult; failures are reported, never raised
        """
        with store_context(store_id, dry_run=dry_run):
            start_time = time.time()
            result = StoreRunResult(store_id=store_id, status=RunStatus.SUCCESS)
            try:
                await self._run(result, csv_text, dry_run)
            except Exception as e:
                result.status = RunStatus.FAILED
                result.plan = None
                result.updated_csv = None
                result.message = f"Pipeline failed: {e}"
                result.error_details = {
                    "error_type": type(e).__name__,
                    "error_message": str(e),
                }
                logger.error("store_pipeline_failed", error=str(e), exc_info=True)
            else:
                logger.info("store_pipeline_complete", status=result.status.value, detail=result.message)
            finally:
                result.duration_seconds = time.time() - start_time

        return result

    async def _run(self, result: StoreRunResult, csv_text: str, dry_run: bool) -> None:
        master = parse_location_master(csv_text, min_columns=self.ingest.min_columns)
        resolver = await self.resolver_provider()

        async with self.session_factory() as session:
            repo = FixtureRepository(session)
            existing = await repo.get_store_fixtures(result.store_id)

            if not master.observations and not existing:
                result.status = RunStatus.SKIPPED
                result.message = "No fixtures in export and none on record"
                return

            plan = self.engine.reconcile(
                result.store_id, master.observations, existing, resolver=resolver
            )
            result.plan = plan
            result.updated_csv = write_fixture_ids(
                master, plan.fixture_ids, column=self.ingest.fixture_id_column
            )

            if dry_run:
                result.status = RunStatus.DRY_RUN
                result.message = (
                    f"Would insert {len(plan.final_fixtures)} fixture records "
                    f"and move {len(plan.archive_list)} to STORAGE"
                )
                return

            inserted, archived = await repo.apply_plan(plan, existing)
            result.message = f"Inserted {inserted} fixture records, moved {archived} to STORAGE"


async def run_batch(
    pipeline: StorePipeline,
    jobs: Iterable[StoreJob],
    dry_run: bool = False,
    continue_on_error: bool = True,
) -> BatchSummary:
    """Run stores sequentially.

    When ``continue_on_error`` is False, stores after the first failure are
    reported as SKIPPED.
    """
    jobs = list(jobs)
    summary = BatchSummary()
    stopped = False

    with batch_context(len(jobs)):
        for job in jobs:
            if stopped:
                summary.results.append(
                    StoreRunResult(
                        store_id=job.store_id,
                        status=RunStatus.SKIPPED,
                        message="Skipped after earlier failure",
                    )
                )
                continue

            result = await pipeline.run(job.store_id, job.csv_text, dry_run=dry_run)
            summary.results.append(result)

            if result.status == RunStatus.FAILED and not continue_on_error:
                stopped = True

        logger.info(
            "batch_complete",
            total=summary.total,
            succeeded=summary.succeeded,
            failed=summary.failed,
            skipped=summary.skipped,
        )
    return summary
