from .task_index import TaskIndex, fingerprint

__all__ = ["TaskIndex", "fingerprint"]
