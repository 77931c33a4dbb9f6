from .index_lifecycle import IndexLifecycleManager, LifecycleResult

__all__ = ["IndexLifecycleManager", "LifecycleResult"]
