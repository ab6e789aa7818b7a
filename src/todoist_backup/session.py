"""Sync session: the process-scoped orchestrator.

A session owns the only mutable state that outlives a run: the in-progress
flag, the last configuration snapshot and the periodic timer. Everything a
run computes (tasks, trees, plans) is discarded when the run ends.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from collections.abc import Callable
from types import TracebackType
from typing import Literal

from todoist_backup.auth import (
    ROAM_TOKEN_ENV,
    TODOIST_TOKEN_ENV,
    create_token_resolver,
    resolve_optional_token,
)
from todoist_backup.contracts.blocks import BlockNode
from todoist_backup.contracts.config import BackupConfig
from todoist_backup.contracts.exceptions import TodoistBackupError
from todoist_backup.contracts.gateway import BlockGateway
from todoist_backup.contracts.progress import NullSyncProgress, SyncProgress
from todoist_backup.contracts.renderer import RenderContext, TaskRenderer
from todoist_backup.contracts.source import TaskSource
from todoist_backup.contracts.sync import SyncOutcome, SyncStatus
from todoist_backup.engine.reconciler import Reconciler
from todoist_backup.exclusions import apply_title_exclusions, compile_exclusion_patterns
from todoist_backup.gateways.factory import create_gateway
from todoist_backup.layout import group_by_location
from todoist_backup.normalize import attach_comments, build_label_map, build_name_map, normalize, sort_tasks
from todoist_backup.renderers.factory import create_renderer
from todoist_backup.sources.factory import create_source

logger = logging.getLogger(__name__)

Trigger = Literal["manual", "auto"]
ConfigLoader = Callable[[], BackupConfig]
SourceFactory = Callable[[BackupConfig, str | None], TaskSource]
GatewayFactory = Callable[..., BlockGateway]

_PACKAGE_LOGGER = "todoist_backup"


def apply_verbose(verbose: bool) -> None:
    logging.getLogger(_PACKAGE_LOGGER).setLevel(logging.DEBUG if verbose else logging.NOTSET)


class SyncSession:
    def __init__(
        self,
        config_loader: ConfigLoader,
        *,
        source_factory: SourceFactory = create_source,
        gateway_factory: GatewayFactory = create_gateway,
        renderer: TaskRenderer | None = None,
        progress: SyncProgress | None = None,
    ) -> None:
        self._config_loader = config_loader
        self._source_factory = source_factory
        self._gateway_factory = gateway_factory
        self._renderer = renderer or create_renderer("roam")
        self._progress: SyncProgress = progress or NullSyncProgress()

        self._in_progress = False
        self._config: BackupConfig | None = None
        self._todoist_token: str | None = None
        self._started = False
        self._timer: asyncio.Task[None] | None = None
        self._timer_key: tuple[float, str] | None = None
        self.last_outcome: SyncOutcome | None = None

    async def __aenter__(self) -> SyncSession:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.close()

    @property
    def in_progress(self) -> bool:
        return self._in_progress

    @property
    def config(self) -> BackupConfig | None:
        return self._config

    @property
    def timer_armed(self) -> bool:
        return self._timer is not None and not self._timer.done()

    async def refresh_config(self) -> BackupConfig:
        """Reload the configuration snapshot and rearm the timer if it changed."""
        config = self._config_loader()
        self._config = config
        apply_verbose(config.verbose)
        self._todoist_token = await resolve_optional_token(
            create_token_resolver(config.todoist_token, TODOIST_TOKEN_ENV)
        )
        self._rearm()
        return config

    async def sync(
        self,
        trigger: Trigger = "manual",
        *,
        dry_run: bool = False,
        progress: SyncProgress | None = None,
    ) -> SyncOutcome:
        if self._in_progress:
            message = "Sync already in progress"
            if trigger == "manual":
                logger.warning(message)
            else:
                logger.debug("automatic sync skipped: run already in progress")
            return SyncOutcome(status=SyncStatus.REJECTED, trigger=trigger, message=message)

        self._in_progress = True
        try:
            config = await self.refresh_config()
            if not self._can_fetch(config):
                message = "Todoist API token is not configured (set todoist_token or TODOIST_API_TOKEN)"
                if trigger == "manual":
                    logger.warning(message)
                else:
                    logger.debug("automatic sync skipped: no Todoist token")
                outcome = SyncOutcome(status=SyncStatus.SKIPPED, trigger=trigger, message=message)
            else:
                outcome = await self._run(config, self._todoist_token, trigger, dry_run, progress or self._progress)
        except TodoistBackupError as exc:
            logger.error("sync failed: %s", exc)
            raise
        finally:
            self._in_progress = False

        self.last_outcome = outcome
        return outcome

    async def _run(
        self,
        config: BackupConfig,
        todoist_token: str | None,
        trigger: Trigger,
        dry_run: bool,
        progress: SyncProgress,
    ) -> SyncOutcome:
        roam_token = await resolve_optional_token(create_token_resolver(config.roam_token, ROAM_TOKEN_ENV))
        gateway = self._gateway_factory(config, roam_token, dry_run=dry_run)

        async with self._source_factory(config, todoist_token) as source:
            progress.phase_start("Fetch")
            try:
                active_raw, completed_raw, projects_raw, labels_raw = await asyncio.gather(
                    source.fetch_active_tasks(),
                    source.fetch_completed_tasks(),
                    source.fetch_projects(),
                    source.fetch_labels(),
                )
                progress.phase_done("Fetch")
            except BaseException as exc:
                progress.phase_error("Fetch", exc)
                raise

            tasks = normalize(active_raw, completed_raw)
            kept = apply_title_exclusions(tasks, compile_exclusion_patterns(config.exclude_title_patterns))
            if config.include_comments and kept:
                comments = await source.fetch_comments([task.id for task in kept])
                kept = attach_comments(kept, comments)

        context = RenderContext(
            project_names=build_name_map(projects_raw),
            label_names=build_label_map(labels_raw),
            status_aliases=config.status_aliases,
        )
        desired: dict[str, list[BlockNode]] = group_by_location(
            sort_tasks(kept),
            self._renderer,
            context,
            page_prefix=config.page_prefix,
            page_mode=config.page_mode,
        )
        logger.debug("prepared %d tasks across %d locations", len(kept), len(desired))

        async with gateway:
            reconciler = Reconciler(
                gateway,
                page_prefix=config.page_prefix,
                status_aliases=config.status_aliases,
                delay_seconds=0.0 if dry_run else config.mutation_delay_ms / 1000,
                yield_every=config.yield_every,
                dry_run=dry_run,
                progress=progress,
            )
            result = await reconciler.reconcile(desired)

        completed_count = sum(1 for task in tasks if task.is_completed)
        logger.info(
            "%s sync finished: %d tasks, %d created, %d updated, %d deleted",
            trigger,
            len(kept),
            result.created,
            result.updated,
            result.deleted,
        )
        return SyncOutcome(
            status=SyncStatus.COMPLETED,
            trigger=trigger,
            active_tasks=len(tasks) - completed_count,
            completed_tasks=completed_count,
            excluded_tasks=len(tasks) - len(kept),
            synced_tasks=len(kept),
            result=result,
        )

    async def start(self) -> None:
        """Begin periodic automatic runs using the current configuration."""
        self._started = True
        if self._config is None:
            await self.refresh_config()
        else:
            self._rearm()

    async def stop(self) -> None:
        self._started = False
        await self._cancel_timer()

    async def close(self) -> None:
        await self.stop()

    def _can_fetch(self, config: BackupConfig) -> bool:
        return config.source == "demo" or bool(self._todoist_token)

    def _rearm(self) -> None:
        if not self._started or self._config is None:
            return
        key: tuple[float, str] | None = None
        if self._can_fetch(self._config):
            key = (self._config.interval_seconds, self._todoist_token or "")

        if self._timer is not None and self._timer is asyncio.current_task():
            # Called from an automatic run; the loop picks up the new key.
            self._timer_key = key
            return
        if key is None:
            if self._timer is not None:
                logger.debug("automatic sync disabled: no Todoist token")
            self._timer_key = None
            self._discard_timer()
            return
        if self.timer_armed and key == self._timer_key:
            return

        self._discard_timer()
        self._timer_key = key
        self._timer = asyncio.create_task(self._auto_loop(), name="todoist-backup-auto-sync")
        logger.debug("automatic sync every %.0f seconds", key[0])

    async def _auto_loop(self) -> None:
        while self._timer_key is not None:
            await asyncio.sleep(self._timer_key[0])
            try:
                await self.sync("auto")
            except TodoistBackupError:
                logger.debug("automatic sync will run again in %.0f seconds", self._timer_key[0] if self._timer_key else 0)
            except Exception:
                logger.exception("automatic sync failed")

    def _discard_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    async def _cancel_timer(self) -> None:
        timer, self._timer = self._timer, None
        self._timer_key = None
        if timer is None or timer is asyncio.current_task():
            return
        timer.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await timer
