"""Tasks API routes: board, CRUD, comments, recurrence trigger."""
from flask import jsonify, request
from flask_login import current_user

from . import tasks_bp
from .services.task_service import TaskService
from .services.comment_service import CommentService
from .services.recurrence_service import process_recurring_tasks
from core.utils.api_helpers import (
    api_login_required, admin_required, error_response, get_json_or_error, safe_error_response,
)

_task_service = TaskService()
_comment_service = CommentService()


def _result(result, key, **extra):
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, key: getattr(result, key), **extra}), result.status_code


# ============== TASKS ==============

@tasks_bp.route('/api/tasks')
@api_login_required
def api_list_tasks():
    """``?view=my-tasks|team-tasks|client-tasks|all-tasks&assignee=&status=``"""
    try:
        data = _task_service.list_tasks(
            current_user,
            view=request.args.get('view') or None,
            assignee=request.args.get('assignee') or None,
            status=request.args.get('status') or None,
        )
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, **data})


@tasks_bp.route('/api/tasks', methods=['POST'])
@api_login_required
def api_create_task():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _task_service.create_task(current_user, data)
    except Exception as e:
        return safe_error_response(e)
    return _result(result, 'task')


@tasks_bp.route('/api/tasks/<task_id>')
@api_login_required
def api_get_task(task_id):
    try:
        result = _task_service.get_task(current_user, task_id)
    except Exception as e:
        return safe_error_response(e)
    return _result(result, 'task')


@tasks_bp.route('/api/tasks', methods=['PATCH'])
@tasks_bp.route('/api/tasks/<task_id>', methods=['PATCH'])
@api_login_required
def api_update_task(task_id=None):
    task_id = task_id or request.args.get('id')
    if not task_id:
        return error_response('Task ID is required', 400)
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _task_service.update_task(current_user, task_id, data)
    except Exception as e:
        return safe_error_response(e)
    return _result(result, 'task')


@tasks_bp.route('/api/tasks', methods=['DELETE'])
@tasks_bp.route('/api/tasks/<task_id>', methods=['DELETE'])
@api_login_required
def api_delete_task(task_id=None):
    task_id = task_id or request.args.get('id')
    if not task_id:
        return error_response('Task ID is required', 400)
    try:
        result = _task_service.delete_task(current_user, task_id)
    except Exception as e:
        return safe_error_response(e)
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, 'message': 'Task deleted successfully'})


@tasks_bp.route('/api/tasks/recurrence/run', methods=['POST'])
@admin_required
def api_run_recurrence():
    """Generate due recurring instances now (the scheduler does this hourly)."""
    try:
        summary = process_recurring_tasks()
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, **summary})


# ============== COMMENTS ==============

@tasks_bp.route('/api/tasks/<task_id>/comments')
@tasks_bp.route('/api/task-comments')
@api_login_required
def api_list_comments(task_id=None):
    task_id = task_id or request.args.get('taskId')
    if not task_id:
        return error_response('taskId is required', 400)
    try:
        comments = _comment_service.list_comments(current_user, task_id)
    except Exception as e:
        return safe_error_response(e)
    if comments is None:
        return error_response('Task not found', 404)
    return jsonify({'success': True, 'comments': comments})


@tasks_bp.route('/api/tasks/<task_id>/comments', methods=['POST'])
@tasks_bp.route('/api/task-comments', methods=['POST'])
@api_login_required
def api_add_comment(task_id=None):
    data, error = get_json_or_error()
    if error:
        return error
    task_id = task_id or data.get('task_id')
    if not task_id:
        return error_response('task_id is required', 400)
    try:
        result = _comment_service.add_comment(
            current_user, task_id, data.get('content'), data.get('is_internal', False))
    except Exception as e:
        return safe_error_response(e)
    return _result(result, 'comment')


@tasks_bp.route('/api/task-comments', methods=['DELETE'])
@tasks_bp.route('/api/task-comments/<comment_id>', methods=['DELETE'])
@api_login_required
def api_delete_comment(comment_id=None):
    comment_id = comment_id or request.args.get('id')
    if not comment_id:
        return error_response('Comment ID is required', 400)
    try:
        result = _comment_service.delete_comment(current_user, comment_id)
    except Exception as e:
        return safe_error_response(e)
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, 'message': 'Comment deleted'})
