"""Comment Service - task discussion threads with mentions."""
from dataclasses import dataclass
from typing import Optional, Dict, Any

from core.utils.logging_config import get_logger
from core.auth import permissions
from core.auth.repositories import ProfileRepository
from core.notifications.notify import notify_users

from ..mentions import parse_mentions
from ..repositories import TaskRepository, CommentRepository
from ..validators import COMMENT_MAX_LENGTH

logger = get_logger('howard.tasks.comments')


@dataclass
class CommentResult:
    success: bool
    comment: Optional[Dict[str, Any]] = None
    error: Optional[str] = None
    status_code: int = 200


class CommentService:

    def __init__(self):
        self.task_repo = TaskRepository()
        self.comment_repo = CommentRepository()
        self.profile_repo = ProfileRepository()

    def _visible_task(self, profile, task_id):
        task = self.task_repo.get_by_id(task_id)
        if not task:
            return None
        if permissions.is_client(profile) and not permissions.can_view_task(profile, task):
            return None
        return task

    def list_comments(self, profile, task_id):
        """None when the task is not visible; internal notes hidden from clients."""
        if not self._visible_task(profile, task_id):
            return None
        return self.comment_repo.list_for_task(
            task_id, include_internal=permissions.is_team_role(profile))

    def add_comment(self, profile, task_id, content, is_internal=False) -> CommentResult:
        content = (content or '').strip() if isinstance(content, str) else ''
        if not content:
            raise ValueError('content is required')
        if len(content) > COMMENT_MAX_LENGTH:
            raise ValueError(f'Comment must be {COMMENT_MAX_LENGTH} characters or less')

        task = self._visible_task(profile, task_id)
        if not task:
            return CommentResult(False, error='Task not found', status_code=404)

        internal = bool(is_internal) and permissions.is_team_role(profile)
        mentions = parse_mentions(content, self.profile_repo.list_active_for_mentions())
        comment = self.comment_repo.create(task_id, profile.id, content, mentions, internal)

        self._notify(profile, task, comment, mentions)
        return CommentResult(True, comment=comment, status_code=201)

    def _notify(self, commenter, task, comment, mentions):
        """Mentioned users get a mention; assignee and creator get a comment notice."""
        name = commenter.full_name or commenter.email or 'Someone'
        preview = comment['content'][:200]
        mentioned = [m for m in mentions if m != commenter.id]
        watchers = [
            uid for uid in (task.get('assigned_to'), task.get('created_by'))
            if uid and uid != commenter.id and uid not in mentioned
        ]
        if comment.get('is_internal'):
            recipients = self.profile_repo.get_many(mentioned + watchers)
            team = {r['id'] for r in recipients if r.get('role') in ('admin', 'manager', 'user')}
            mentioned = [m for m in mentioned if m in team]
            watchers = [w for w in watchers if w in team]

        notify_users(mentioned, f'{name} mentioned you', type='task_mention', message=preview,
                     action_url='/tasks', resource_type='task', resource_id=task['id'],
                     org_id=task.get('org_id'))
        notify_users(watchers, f'New comment on "{task["title"]}"', type='task_comment',
                     message=preview, action_url='/tasks', resource_type='task',
                     resource_id=task['id'], org_id=task.get('org_id'))

    def delete_comment(self, profile, comment_id) -> CommentResult:
        comment = self.comment_repo.get_by_id(comment_id)
        if not comment:
            return CommentResult(False, error='Comment not found', status_code=404)
        if comment['user_id'] != profile.id and not permissions.is_admin_or_manager(profile):
            return CommentResult(False, error='Permission denied', status_code=403)
        self.comment_repo.delete(comment_id)
        return CommentResult(True, comment=comment)
