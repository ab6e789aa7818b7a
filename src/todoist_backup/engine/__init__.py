"""Reconciliation engine."""

from todoist_backup.engine.executor import MutationExecutor
from todoist_backup.engine.planner import LocationPlan, plan_cleanup, plan_location
from todoist_backup.engine.reconciler import Reconciler

__all__ = ["LocationPlan", "MutationExecutor", "Reconciler", "plan_cleanup", "plan_location"]
