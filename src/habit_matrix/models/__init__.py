from .task import CachedDocument, MutationResult, Quadrant, TaskRecord

__all__ = [
    "CachedDocument",
    "MutationResult",
    "Quadrant",
    "TaskRecord",
]
