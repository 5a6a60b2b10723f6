from .reconciler import PollingView, ReconcileState, habits_view, matrix_view

__all__ = ["PollingView", "ReconcileState", "habits_view", "matrix_view"]
