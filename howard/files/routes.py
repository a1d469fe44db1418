"""Files API routes: org files, sharing, client channels and folders."""
from flask import jsonify, redirect, request
from flask_login import current_user

from . import files_bp
from .services import FileService, ChannelService
from core.utils.api_helpers import (
    api_login_required, admin_required, admin_or_manager_required, arg_bool,
    error_response, get_json_or_error, safe_error_response,
)

_file_service = FileService()
_channel_service = ChannelService()


def _respond(result, key=None):
    if not result.success:
        return error_response(result.error, result.status_code)
    body = {'success': True}
    if key:
        body[key] = result.data
    else:
        body.update(result.data)
    return jsonify(body), result.status_code


# ============== FILES ==============

@files_bp.route('/api/files')
@api_login_required
def api_list_files():
    """``?folderPath=/&view=all|my-files&channelId=``"""
    try:
        result = _file_service.list_files(
            current_user,
            folder_path=request.args.get('folderPath') or '/',
            view=request.args.get('view') or 'all',
            channel_id=request.args.get('channelId') or None,
        )
    except Exception as e:
        return safe_error_response(e)
    return _respond(result)


@files_bp.route('/api/files/upload', methods=['POST'])
@api_login_required
def api_upload_file():
    """Multipart upload: ``file`` plus optional folderPath/description/channelId."""
    upload = request.files.get('file')
    if upload is None or not upload.filename:
        return error_response('No file provided', 400)
    try:
        result = _file_service.upload(
            current_user,
            filename=upload.filename,
            content=upload.read(),
            mime_type=upload.mimetype,
            folder_path=request.form.get('folderPath') or '/',
            description=request.form.get('description'),
            channel_id=request.form.get('channelId') or None,
        )
    except Exception as e:
        return safe_error_response(e)
    if not result.success:
        return error_response(result.error, result.status_code)
    return jsonify({'success': True, 'file': result.data, 'message': 'File uploaded successfully'})


@files_bp.route('/api/files/download')
@files_bp.route('/api/files/<file_id>/download')
@api_login_required
def api_download_file(file_id=None):
    """Signed download URL; ``?redirect=true`` answers with a 302 instead."""
    file_id = file_id or request.args.get('id')
    if not file_id:
        return error_response('File ID required', 400)
    try:
        result = _file_service.download_url(current_user, file_id)
    except Exception as e:
        return safe_error_response(e)
    if result.success and arg_bool('redirect', False):
        return redirect(result.data['url'])
    return _respond(result)


@files_bp.route('/api/files/share', methods=['POST'])
@admin_required
def api_share_file():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _file_service.share(current_user, data.get('fileId'), data.get('userIds'),
                                     data.get('permission') or 'view')
    except Exception as e:
        return safe_error_response(e)
    return _respond(result)


@files_bp.route('/api/files/share')
@files_bp.route('/api/files/<file_id>/permissions')
@api_login_required
def api_file_permissions(file_id=None):
    file_id = file_id or request.args.get('fileId')
    if not file_id:
        return error_response('fileId required', 400)
    try:
        result = _file_service.list_permissions(current_user, file_id)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result, 'permissions')


@files_bp.route('/api/files', methods=['DELETE'])
@files_bp.route('/api/files/<file_id>', methods=['DELETE'])
@api_login_required
def api_delete_file(file_id=None):
    file_id = file_id or request.args.get('id')
    if not file_id:
        return error_response('File ID required', 400)
    try:
        result = _file_service.delete(current_user, file_id)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result)


# ============== CHANNELS ==============

@files_bp.route('/api/file-channels')
@api_login_required
def api_list_channels():
    try:
        channels = _channel_service.list_channels(current_user)
    except Exception as e:
        return safe_error_response(e)
    return jsonify({'success': True, 'channels': channels})


@files_bp.route('/api/file-channels/<channel_id>')
@api_login_required
def api_get_channel(channel_id):
    try:
        result = _channel_service.get_channel(current_user, channel_id)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result, 'channel')


@files_bp.route('/api/file-channels', methods=['POST'])
@admin_or_manager_required
def api_create_channel():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _channel_service.create_channel(current_user, data)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result, 'channel')


@files_bp.route('/api/file-channels/<channel_id>', methods=['PATCH'])
@admin_or_manager_required
def api_update_channel(channel_id):
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _channel_service.update_channel(current_user, channel_id, data)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result, 'channel')


@files_bp.route('/api/file-channels/<channel_id>', methods=['DELETE'])
@admin_or_manager_required
def api_delete_channel(channel_id):
    try:
        result = _channel_service.delete_channel(current_user, channel_id)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result)


# ============== FOLDERS ==============

@files_bp.route('/api/channel-folders')
@api_login_required
def api_list_folders():
    try:
        result = _channel_service.list_folders(current_user, request.args.get('channelId'),
                                               request.args.get('parentPath') or '/')
    except Exception as e:
        return safe_error_response(e)
    return _respond(result, 'folders')


@files_bp.route('/api/channel-folders', methods=['POST'])
@admin_or_manager_required
def api_create_folder():
    data, error = get_json_or_error()
    if error:
        return error
    try:
        result = _channel_service.create_folder(current_user, data)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result, 'folder')


@files_bp.route('/api/channel-folders/<folder_id>', methods=['DELETE'])
@admin_or_manager_required
def api_delete_folder(folder_id):
    try:
        result = _channel_service.delete_folder(current_user, folder_id)
    except Exception as e:
        return safe_error_response(e)
    return _respond(result)
