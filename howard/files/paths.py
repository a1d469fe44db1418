"""Folder and storage path helpers.

Folder paths always start and end with ``/`` (the root is ``/``).
"""
import re
import uuid

from werkzeug.utils import secure_filename

from core.supabase.config import MAX_UPLOAD_BYTES

MAX_FILE_SIZE = MAX_UPLOAD_BYTES

_EXTENSION_RE = re.compile(r'[A-Za-z0-9]{1,10}')


def normalize_folder_path(path):
    if not path:
        return '/'
    parts = [p for p in str(path).replace('\\', '/').split('/') if p and p != '.']
    if '..' in parts:
        raise ValueError('Invalid folder path')
    return '/' + ''.join(f'{p}/' for p in parts)


def child_folder_path(parent_path, name):
    """Path of folder ``name`` inside ``parent_path``."""
    return normalize_folder_path(f'{normalize_folder_path(parent_path)}{name}')


def file_extension(filename):
    """Extension of a client-supplied filename, usable as a storage key suffix."""
    name = secure_filename(filename or '')
    ext = name.rsplit('.', 1)[-1] if name else ''
    return ext if _EXTENSION_RE.fullmatch(ext) else ''


def build_storage_path(org_id, folder_path, filename, file_id=None):
    """``{org_id}{folder_path}{file_id}.{ext}``, without ``.{ext}`` when there is none.

    Returns (file_id, path).
    """
    file_id = file_id or str(uuid.uuid4())
    ext = file_extension(filename)
    suffix = f'.{ext}' if ext else ''
    return file_id, f'{org_id}{normalize_folder_path(folder_path)}{file_id}{suffix}'


def validate_folder_name(name):
    if not isinstance(name, str) or not name.strip():
        raise ValueError('Folder name is required')
    name = name.strip()
    if '/' in name or name in ('.', '..'):
        raise ValueError('Folder name cannot contain "/"')
    if len(name) > 100:
        raise ValueError('Folder name must be 100 characters or less')
    return name


def like_prefix(path):
    """LIKE pattern matching everything under ``path``."""
    escaped = path.replace('\\', '\\\\').replace('%', '\\%').replace('_', '\\_')
    return escaped + '%'
