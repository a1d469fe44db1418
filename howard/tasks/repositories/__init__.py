"""Task repositories package."""
from .task_repository import TaskRepository
from .comment_repository import CommentRepository

__all__ = ['TaskRepository', 'CommentRepository']
