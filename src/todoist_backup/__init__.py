"""todoist-backup: one-way Todoist to Roam Research synchronizer."""

from todoist_backup.config import load_config
from todoist_backup.contracts import (
    AuthenticationError,
    BackupConfig,
    BlockGateway,
    BlockNode,
    CanonicalTask,
    ConfigError,
    ExistingBlock,
    GatewayError,
    NullSyncProgress,
    ReconcileResult,
    SourceError,
    StatusAliases,
    SyncError,
    SyncOutcome,
    SyncProgress,
    SyncStatus,
    TaskSource,
    TaskStatus,
    TodoistBackupError,
)
from todoist_backup.engine import Reconciler
from todoist_backup.gateways import DryRunGateway, RoamGateway, create_gateway
from todoist_backup.session import SyncSession
from todoist_backup.sources import TodoistClient, create_source

__version__ = "1.4.0"

__all__ = [
    "AuthenticationError",
    "BackupConfig",
    "BlockGateway",
    "BlockNode",
    "CanonicalTask",
    "ConfigError",
    "DryRunGateway",
    "ExistingBlock",
    "GatewayError",
    "NullSyncProgress",
    "Reconciler",
    "ReconcileResult",
    "RoamGateway",
    "SourceError",
    "StatusAliases",
    "SyncError",
    "SyncOutcome",
    "SyncProgress",
    "SyncSession",
    "SyncStatus",
    "TaskSource",
    "TaskStatus",
    "TodoistBackupError",
    "TodoistClient",
    "__version__",
    "create_gateway",
    "create_source",
    "load_config",
]
