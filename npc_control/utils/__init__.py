from .tasks import drain_background_tasks, safe_create_task

__all__ = ["drain_background_tasks", "safe_create_task"]
