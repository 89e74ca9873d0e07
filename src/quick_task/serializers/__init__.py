from .task_serializer import TaskSerializer, serialize_task

__all__ = ["TaskSerializer", "serialize_task"]
