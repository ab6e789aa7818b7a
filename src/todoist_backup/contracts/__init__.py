"""Public contracts for todoist-backup."""

from todoist_backup.contracts.blocks import (
    BlockNode,
    BlockOrder,
    CreateBlock,
    DeleteBlock,
    ExistingBlock,
    MutationIntent,
    UpdateBlock,
)
from todoist_backup.contracts.config import BackupConfig, StatusAliases
from todoist_backup.contracts.exceptions import (
    AuthenticationError,
    ConfigError,
    GatewayError,
    SourceError,
    SyncError,
    TodoistBackupError,
)
from todoist_backup.contracts.gateway import BlockGateway
from todoist_backup.contracts.progress import NullSyncProgress, SyncProgress
from todoist_backup.contracts.renderer import RenderContext, TaskRenderer
from todoist_backup.contracts.source import RawRecord, TaskSource
from todoist_backup.contracts.sync import ReconcileResult, SyncOutcome, SyncStatus
from todoist_backup.contracts.task import (
    CanonicalTask,
    RawComment,
    RawCompletedItem,
    RawLabel,
    RawProject,
    RawTask,
    TaskComment,
    TaskDue,
    TaskId,
    TaskStatus,
)

__all__ = [
    "AuthenticationError",
    "BackupConfig",
    "BlockGateway",
    "BlockNode",
    "BlockOrder",
    "CanonicalTask",
    "ConfigError",
    "CreateBlock",
    "DeleteBlock",
    "ExistingBlock",
    "GatewayError",
    "MutationIntent",
    "NullSyncProgress",
    "RawComment",
    "RawCompletedItem",
    "RawLabel",
    "RawProject",
    "RawRecord",
    "RawTask",
    "ReconcileResult",
    "RenderContext",
    "SourceError",
    "StatusAliases",
    "SyncError",
    "SyncOutcome",
    "SyncProgress",
    "SyncStatus",
    "TaskComment",
    "TaskDue",
    "TaskId",
    "TaskRenderer",
    "TaskSource",
    "TaskStatus",
    "TodoistBackupError",
    "UpdateBlock",
]
