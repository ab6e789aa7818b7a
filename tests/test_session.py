from __future__ import annotations

import asyncio
import logging
from typing import Any

import pytest

from todoist_backup.contracts.config import BackupConfig
from todoist_backup.contracts.exceptions import AuthenticationError, ConfigError, SourceError
from todoist_backup.contracts.sync import SyncStatus
from todoist_backup.contracts.task import TaskComment
from todoist_backup.gateways.dry_run import DryRunGateway
from todoist_backup.session import SyncSession, apply_verbose
from tests.fakes.gateway import FakeGateway
from tests.fakes.progress import RecordingProgress
from tests.fakes.source import FakeSource


@pytest.fixture(autouse=True)
def _no_token_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("TODOIST_API_TOKEN", raising=False)
    monkeypatch.delenv("ROAM_API_TOKEN", raising=False)


def _session(
    config: BackupConfig | list[BackupConfig],
    source: FakeSource,
    gateway: FakeGateway | None = None,
    **kwargs: Any,
) -> SyncSession:
    configs = config if isinstance(config, list) else [config]
    fake_gateway = gateway or FakeGateway()
    return SyncSession(
        lambda: configs[-1],
        source_factory=lambda _config, _token: source,
        gateway_factory=lambda _config, _token, *, dry_run: fake_gateway,
        **kwargs,
    )


@pytest.mark.asyncio
async def test_sync_fetches_renders_and_reconciles(base_config: BackupConfig) -> None:
    source = FakeSource(
        active=[{"id": "1", "content": "Test", "project_id": "p1", "due": {"date": "2025-01-02"}}],
        completed=[{"task_id": "2", "content": "Done", "completed_date": "2025-01-01"}],
        projects=[{"id": "p1", "name": "Work"}],
    )
    gateway = FakeGateway()
    session = _session(base_config, source, gateway)

    outcome = await session.sync()

    assert outcome.status == SyncStatus.COMPLETED
    assert (outcome.active_tasks, outcome.completed_tasks, outcome.synced_tasks) == (1, 1, 2)
    assert sorted(source.calls) == ["active", "completed", "labels", "projects"]
    assert source.entered and source.exited
    assert gateway.entered and gateway.exited
    assert [node.text for node in gateway.page_tree("todoist/1")] == ["[[January 2nd, 2025]] Test #Work"]
    assert session.last_outcome == outcome
    assert not session.in_progress


@pytest.mark.asyncio
async def test_excluded_titles_never_reach_the_graph(base_config: BackupConfig) -> None:
    config = base_config.model_copy(update={"exclude_title_patterns": ["/^Chore/"]})
    source = FakeSource(active=[{"id": "1", "content": "Chore: trash"}, {"id": "2", "content": "Buy milk"}])
    gateway = FakeGateway()

    outcome = await _session(config, source, gateway).sync()

    assert outcome.excluded_tasks == 1
    assert "todoist/1" not in gateway.pages
    assert all("Chore" not in text for _, text, _ in gateway.created_blocks)
    assert "todoist/2" in gateway.pages


@pytest.mark.asyncio
async def test_comments_fetched_only_for_kept_tasks(base_config: BackupConfig) -> None:
    config = base_config.model_copy(update={"include_comments": True, "exclude_title_patterns": ["skip"]})
    comment = TaskComment(id="c1", task_id="1", text="hello", posted_at="2025-01-02T00:00:00Z")
    source = FakeSource(
        active=[{"id": "1", "content": "keep"}, {"id": "2", "content": "skip me"}],
        comments={"1": [comment]},
    )
    gateway = FakeGateway()

    await _session(config, source, gateway).sync()

    assert source.comment_requests == [["1"]]
    children = gateway.page_tree("todoist/1")[0].children
    assert children[-1].text == "comments...\ntodoist-comments:: 1"


@pytest.mark.asyncio
async def test_comments_not_fetched_when_disabled(base_config: BackupConfig) -> None:
    source = FakeSource(active=[{"id": "1", "content": "keep"}], comments={"1": []})

    await _session(base_config, source).sync()

    assert source.comment_requests == []


@pytest.mark.asyncio
async def test_missing_todoist_token_skips_run(base_config: BackupConfig, caplog: pytest.LogCaptureFixture) -> None:
    config = base_config.model_copy(update={"todoist_token": None})
    source = FakeSource()

    with caplog.at_level(logging.WARNING, logger="todoist_backup.session"):
        outcome = await _session(config, source).sync()

    assert outcome.status == SyncStatus.SKIPPED
    assert "TODOIST_API_TOKEN" in outcome.message
    assert source.calls == []
    assert "not configured" in caplog.text


@pytest.mark.asyncio
async def test_demo_source_runs_without_todoist_token(base_config: BackupConfig) -> None:
    config = base_config.model_copy(update={"todoist_token": None, "source": "demo"})
    gateway = FakeGateway()
    session = SyncSession(lambda: config, gateway_factory=lambda _config, _token, *, dry_run: gateway)

    outcome = await session.sync()

    assert outcome.status == SyncStatus.COMPLETED
    assert (outcome.active_tasks, outcome.completed_tasks) == (3, 1)
    assert sorted(gateway.pages) == [
        "todoist/demo-001",
        "todoist/demo-002",
        "todoist/demo-003",
        "todoist/demo-completed-001",
    ]

@pytest.mark.asyncio
async def test_token_from_environment(base_config: BackupConfig, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TODOIST_API_TOKEN", "from-env")
    config = base_config.model_copy(update={"todoist_token": None})
    tokens: list[str | None] = []
    source = FakeSource()

    def _source_factory(_config: BackupConfig, token: str | None) -> FakeSource:
        tokens.append(token)
        return source

    session = SyncSession(
        lambda: config,
        source_factory=_source_factory,
        gateway_factory=lambda _config, _token, *, dry_run: FakeGateway(),
    )

    outcome = await session.sync()

    assert outcome.status == SyncStatus.COMPLETED
    assert tokens == ["from-env"]


@pytest.mark.asyncio
async def test_concurrent_trigger_is_rejected(base_config: BackupConfig, caplog: pytest.LogCaptureFixture) -> None:
    source = FakeSource(active=[{"id": "1", "content": "slow"}])
    source.gate = asyncio.Event()
    session = _session(base_config, source)

    first = asyncio.create_task(session.sync())
    for _ in range(50):
        if source.calls:
            break
        await asyncio.sleep(0)
    assert session.in_progress

    with caplog.at_level(logging.WARNING, logger="todoist_backup.session"):
        rejected = await session.sync()
    source.gate.set()
    completed = await first

    assert rejected.status == SyncStatus.REJECTED
    assert "already in progress" in caplog.text
    assert completed.status == SyncStatus.COMPLETED
    assert source.calls.count("active") == 1


@pytest.mark.asyncio
async def test_source_failure_propagates_and_clears_flag(base_config: BackupConfig) -> None:
    source = FakeSource()
    source.fail_with = SourceError("todoist down", status_code=503)
    progress = RecordingProgress()
    session = _session(base_config, source, progress=progress)

    with pytest.raises(SourceError, match="todoist down"):
        await session.sync()

    assert not session.in_progress
    assert source.exited
    assert ("error", "Fetch") in progress.events


@pytest.mark.asyncio
async def test_config_errors_propagate(base_config: BackupConfig) -> None:
    def _broken() -> BackupConfig:
        raise ConfigError("bad config")

    session = SyncSession(_broken, source_factory=lambda _config, _token: FakeSource())

    with pytest.raises(ConfigError):
        await session.sync()
    assert not session.in_progress


@pytest.mark.asyncio
async def test_apply_without_roam_token_fails(base_config: BackupConfig) -> None:
    config = base_config.model_copy(update={"roam_token": None})
    source = FakeSource()
    session = SyncSession(lambda: config, source_factory=lambda _config, _token: source)

    with pytest.raises(AuthenticationError, match="Roam API token"):
        await session.sync()
    assert source.calls == []


@pytest.mark.asyncio
async def test_dry_run_without_roam_token_previews_writes(base_config: BackupConfig) -> None:
    config = base_config.model_copy(update={"roam_token": None})
    source = FakeSource(active=[{"id": "1", "content": "a"}, {"id": "2", "content": "b"}])
    session = SyncSession(lambda: config, source_factory=lambda _config, _token: source)

    outcome = await session.sync(dry_run=True)

    assert outcome.result is not None
    assert outcome.result.dry_run is True
    assert outcome.result.pages_created == 2
    assert outcome.result.created == 2


@pytest.mark.asyncio
async def test_dry_run_reads_but_never_writes(base_config: BackupConfig) -> None:
    inner = FakeGateway()
    inner.seed_page("todoist/9", [])
    source = FakeSource(active=[{"id": "1", "content": "a"}])
    factory_calls: list[bool] = []

    def _gateway_factory(_config: BackupConfig, _token: str | None, *, dry_run: bool) -> DryRunGateway:
        factory_calls.append(dry_run)
        return DryRunGateway(inner)

    session = SyncSession(
        lambda: base_config,
        source_factory=lambda _config, _token: source,
        gateway_factory=_gateway_factory,
    )

    outcome = await session.sync(dry_run=True)

    assert factory_calls == [True]
    assert inner.mutation_count == 0
    assert "todoist/1" not in inner.pages
    assert outcome.result is not None and outcome.result.created == 1


def test_apply_verbose_toggles_package_logger() -> None:
    logger = logging.getLogger("todoist_backup")
    try:
        apply_verbose(True)
        assert logger.level == logging.DEBUG
        apply_verbose(False)
        assert logger.level == logging.NOTSET
    finally:
        logger.setLevel(logging.NOTSET)


@pytest.fixture
def sleep_spy(monkeypatch: pytest.MonkeyPatch) -> list[float]:
    """Intercept timer sleeps; zero-length yields still reach the event loop.

    The first non-zero sleep returns at once so one automatic run happens;
    later ones block until the timer task is cancelled.
    """
    real_sleep = asyncio.sleep
    intervals: list[float] = []
    forever = asyncio.Event()

    async def _sleep(delay: float, result: Any = None) -> Any:
        if not delay:
            return await real_sleep(0, result)
        intervals.append(delay)
        if len(intervals) > 1:
            await forever.wait()
        return result

    monkeypatch.setattr("todoist_backup.session.asyncio.sleep", _sleep)
    return intervals


async def _settle(condition: Any, attempts: int = 200) -> None:
    for _ in range(attempts):
        if condition():
            return
        await asyncio.sleep(0)


@pytest.mark.asyncio
async def test_started_session_runs_automatically(base_config: BackupConfig, sleep_spy: list[float]) -> None:
    source = FakeSource(active=[{"id": "1", "content": "auto"}])
    gateway = FakeGateway()
    session = _session(base_config, source, gateway)

    await session.start()
    await _settle(lambda: session.last_outcome is not None)
    await session.stop()

    assert session.last_outcome is not None
    assert session.last_outcome.trigger == "auto"
    assert sleep_spy[0] == 300.0
    assert "todoist/1" in gateway.pages
    assert not session.timer_armed


@pytest.mark.asyncio
async def test_timer_rearms_only_when_interval_or_token_changes(
    base_config: BackupConfig, sleep_spy: list[float]
) -> None:
    configs = [base_config]
    session = _session(configs, FakeSource())
    # Keep the first interval blocked so no automatic run interferes.
    sleep_spy.append(0.0)

    await session.start()
    await _settle(lambda: len(sleep_spy) >= 2)
    assert session.timer_armed

    await session.refresh_config()
    await _settle(lambda: len(sleep_spy) >= 3, attempts=20)
    assert sleep_spy[1:] == [300.0]

    configs.append(base_config.model_copy(update={"interval_minutes": 10}))
    await session.refresh_config()
    await _settle(lambda: len(sleep_spy) >= 3)
    assert sleep_spy[1:] == [300.0, 600.0]

    configs.append(base_config.model_copy(update={"todoist_token": None, "interval_minutes": 10}))
    await session.refresh_config()
    assert not session.timer_armed

    await session.close()


@pytest.mark.asyncio
async def test_start_without_token_does_not_arm_timer(base_config: BackupConfig) -> None:
    config = base_config.model_copy(update={"todoist_token": None})
    session = _session(config, FakeSource())

    await session.start()

    assert not session.timer_armed
    await session.stop()


@pytest.mark.asyncio
async def test_session_context_manager_stops_timer(base_config: BackupConfig, sleep_spy: list[float]) -> None:
    sleep_spy.append(0.0)

    async with _session(base_config, FakeSource()) as session:
        await session.start()
        assert session.timer_armed

    assert not session.timer_armed
