"""Reconcile desired block trees into the destination graph."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence

from todoist_backup.contracts.blocks import BlockNode
from todoist_backup.contracts.config import StatusAliases
from todoist_backup.contracts.gateway import BlockGateway
from todoist_backup.contracts.progress import NullSyncProgress, SyncProgress
from todoist_backup.contracts.sync import ReconcileResult
from todoist_backup.engine.executor import MutationExecutor
from todoist_backup.engine.planner import LocationPlan, plan_cleanup, plan_location
from todoist_backup.layout import location_prefix

logger = logging.getLogger(__name__)


class Reconciler:
    """Drive one reconciliation pass.

    Locations are processed one after another. For each: get or create the
    page, snapshot its tree, plan, execute. Afterwards every page under the
    configured prefix that received no desired tasks this run is cleaned with
    the same retention rule, which is how a task that moved pages disappears
    from its old one.

    The reconciler never reads the remote task source and never keeps state
    between runs; identity is recovered from the graph every time.
    """

    def __init__(
        self,
        gateway: BlockGateway,
        *,
        page_prefix: str,
        status_aliases: StatusAliases | None = None,
        delay_seconds: float = 0.1,
        yield_every: int = 25,
        dry_run: bool = False,
        progress: SyncProgress | None = None,
    ) -> None:
        self._gateway = gateway
        self._page_prefix = page_prefix
        self._aliases = status_aliases or StatusAliases()
        self._delay_seconds = delay_seconds
        self._yield_every = yield_every
        self._dry_run = dry_run
        self._progress: SyncProgress = progress or NullSyncProgress()

    async def reconcile(self, desired_by_location: Mapping[str, Sequence[BlockNode]]) -> ReconcileResult:
        executor = MutationExecutor(self._gateway, delay_seconds=self._delay_seconds, yield_every=self._yield_every)
        result = ReconcileResult(dry_run=self._dry_run)

        self._progress.phase_start("Reconcile", total=len(desired_by_location))
        try:
            for location, roots in desired_by_location.items():
                await self._reconcile_location(executor, location, roots, result)
                self._progress.item_done("Reconcile")
                await asyncio.sleep(0)
            self._progress.phase_done("Reconcile")
        except BaseException as exc:
            self._progress.phase_error("Reconcile", exc)
            raise

        await self._cleanup_untouched(executor, set(desired_by_location), result)

        result.created = executor.created
        result.updated = executor.updated
        result.deleted = executor.deleted
        result.pages_created = executor.pages_created
        return result

    async def _reconcile_location(
        self,
        executor: MutationExecutor,
        location: str,
        roots: Sequence[BlockNode],
        result: ReconcileResult,
    ) -> None:
        self._progress.location_start("Reconcile", location)
        page_uid, _ = await executor.ensure_page(location)
        tree = await self._gateway.get_tree(page_uid)
        plan = plan_location(page_uid, tree, roots, self._aliases)
        logger.debug(
            "location %s: %d desired, %d existing, %d intents",
            location,
            len(roots),
            len(tree),
            len(plan.intents),
        )
        if plan.skipped:
            logger.warning("location %s: %d blocks without a task id were not written", location, plan.skipped)
        await executor.execute(plan.intents)
        self._report(executor)
        self._tally(plan, result)
        result.locations.append(location)

    async def _cleanup_untouched(self, executor: MutationExecutor, touched: set[str], result: ReconcileResult) -> None:
        self._progress.phase_start("Cleanup")
        try:
            titles = await self._gateway.list_pages(location_prefix(self._page_prefix))
            for title in sorted(titles):
                if title in touched:
                    continue
                self._progress.location_start("Cleanup", title)
                page_uid = await self._gateway.find_page(title)
                if page_uid is None:
                    continue
                tree = await self._gateway.get_tree(page_uid)
                plan = plan_cleanup(page_uid, tree, self._aliases)
                if plan.is_noop:
                    self._tally(plan, result)
                    continue
                logger.debug("cleaning %s: %d intents", title, len(plan.intents))
                await executor.execute(plan.intents)
                self._report(executor)
                self._tally(plan, result)
                result.cleaned_locations.append(title)
                await asyncio.sleep(0)
            self._progress.phase_done("Cleanup")
        except BaseException as exc:
            self._progress.phase_error("Cleanup", exc)
            raise

    def _report(self, executor: MutationExecutor) -> None:
        self._progress.mutations_applied(executor.created, executor.updated, executor.deleted)

    @staticmethod
    def _tally(plan: LocationPlan, result: ReconcileResult) -> None:
        result.retained += plan.retained
        result.duplicates_removed += plan.duplicates
        result.placeholders_removed += plan.placeholders
        result.skipped_roots += plan.skipped
