"""Session reconciliation package."""

from src.session.reconciler import SessionReconciler, StaleSessionError

__all__ = ["SessionReconciler", "StaleSessionError"]
