"""File Service - upload, listing, download links, sharing and deletion.

Objects live in the Supabase Storage bucket; the ``files`` table holds the
metadata. Storage is written first and cleaned up if the row cannot be saved.
"""
from dataclasses import dataclass
from typing import Optional, Any

from core.utils.logging_config import get_logger
from core.auth import permissions
from core.auth.repositories import ActivityRepository
from core.notifications.notify import notify_users
from core.organization.repositories import MembershipRepository
from core.supabase import get_storage_client
from core.supabase.client import SupabaseError

from ..paths import MAX_FILE_SIZE, normalize_folder_path, build_storage_path
from ..repositories import FileRepository, FilePermissionRepository, ChannelRepository
from ..repositories.permission_repository import PERMISSIONS

logger = get_logger('howard.files')

FILES_URL = '/files'
FILE_VIEWS = ('all', 'my-files')


@dataclass
class FileResult:
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    status_code: int = 200


class FileService:

    def __init__(self, storage=None):
        self._storage = storage
        self.file_repo = FileRepository()
        self.permission_repo = FilePermissionRepository()
        self.channel_repo = ChannelRepository()
        self.membership_repo = MembershipRepository()
        self.activity_repo = ActivityRepository()

    @property
    def storage(self):
        if self._storage is None:
            self._storage = get_storage_client()
        return self._storage

    # ── Listing ──

    def list_files(self, profile, folder_path='/', view='all', channel_id=None) -> FileResult:
        folder_path = normalize_folder_path(folder_path)
        if channel_id:
            channel = self.channel_repo.get_by_id(channel_id)
            if not channel or not can_use_channel(profile, channel):
                return FileResult(False, error='Channel not found', status_code=404)
            files = self.file_repo.list_for_channel(channel_id, folder_path)
            return FileResult(True, data={'files': files, 'view': 'channel', 'folderPath': folder_path})

        if permissions.is_client(profile):
            files = self.file_repo.list_visible_to_client(profile.id, folder_path)
            return FileResult(True, data={'files': files, 'view': 'client', 'folderPath': folder_path})

        if view not in FILE_VIEWS:
            raise ValueError(f"Invalid view. Must be one of: {', '.join(FILE_VIEWS)}")
        if not profile.org_id:
            return FileResult(True, data={'files': [], 'view': view, 'folderPath': folder_path})
        files = self.file_repo.list_for_org(
            profile.org_id, folder_path, uploaded_by=profile.id if view == 'my-files' else None)
        return FileResult(True, data={'files': files, 'view': view, 'folderPath': folder_path})

    # ── Upload ──

    def upload(self, profile, filename, content, mime_type=None, folder_path='/',
               description=None, channel_id=None) -> FileResult:
        if not filename or content is None:
            return FileResult(False, error='No file provided', status_code=400)
        if len(content) > MAX_FILE_SIZE:
            return FileResult(False, error='File size exceeds 50MB limit', status_code=400)
        if not profile.org_id:
            return FileResult(False, error='Your profile is not linked to an organization',
                              status_code=400)
        if channel_id:
            channel = self.channel_repo.get_by_id(channel_id)
            if not channel or not can_use_channel(profile, channel):
                return FileResult(False, error='Channel not found', status_code=404)

        folder_path = normalize_folder_path(folder_path)
        mime_type = mime_type or 'application/octet-stream'
        file_id, storage_path = build_storage_path(profile.org_id, folder_path, filename)

        try:
            self.storage.upload(storage_path, content, content_type=mime_type)
        except SupabaseError as e:
            logger.error(f'Storage upload failed for {storage_path}: {e}')
            return FileResult(False, error='Failed to upload file', status_code=500)

        try:
            record = self.file_repo.create({
                'id': file_id,
                'org_id': profile.org_id,
                'channel_id': channel_id,
                'name': filename,
                'size': len(content),
                'mime_type': mime_type,
                'storage_path': storage_path,
                'folder_path': folder_path,
                'uploaded_by': profile.id,
                'description': description or None,
            })
        except Exception:
            logger.exception(f'File row insert failed, removing {storage_path}')
            self._remove_quietly([storage_path])
            return FileResult(False, error='Failed to create file record', status_code=500)

        if channel_id:
            self.channel_repo.touch(channel_id)
        self.activity_repo.try_log('file_uploaded', profile.id, org_id=profile.org_id,
                                   resource_type='file', resource_id=file_id, details={
                                       'file_name': filename,
                                       'file_size': len(content),
                                       'folder_path': folder_path,
                                   })
        logger.info(f'File uploaded: {filename} ({len(content)} bytes) by {profile.id}')
        return FileResult(True, data=record)

    # ── Download ──

    def download_url(self, profile, file_id) -> FileResult:
        """Signed URL for a file the caller may read."""
        file = self.file_repo.get_by_id(file_id)
        if not file:
            return FileResult(False, error='File not found', status_code=404)

        member_orgs = self.membership_repo.org_ids_for_user(profile.id)
        if not permissions.can_download_file(profile, file, member_orgs,
                                             file.get('channel_client_org_id')):
            logger.warning(f'Download denied: user={profile.id} role={profile.role} file={file_id}')
            return FileResult(False, error='Permission denied', status_code=403)

        try:
            url = self.storage.create_signed_url(file['storage_path'])
        except SupabaseError as e:
            logger.error(f"Signed URL failed for {file['storage_path']}: {e}")
            return FileResult(False, error='Failed to download file', status_code=500)

        self.activity_repo.try_log('file_downloaded', profile.id, org_id=file['org_id'],
                                   resource_type='file', resource_id=file_id,
                                   details={'file_name': file['name']})
        return FileResult(True, data={'url': url, 'name': file['name'],
                                      'mime_type': file.get('mime_type')})

    # ── Sharing ──

    def share(self, profile, file_id, user_ids, permission='view') -> FileResult:
        """Replace the file's share list with ``user_ids``."""
        if not file_id or not isinstance(user_ids, list):
            return FileResult(False, error='fileId and userIds array required', status_code=400)
        if permission not in PERMISSIONS:
            raise ValueError(f"Invalid permission. Must be one of: {', '.join(PERMISSIONS)}")

        file = self.file_repo.get_by_id(file_id)
        if not file:
            return FileResult(False, error='File not found', status_code=404)
        if not permissions.is_same_org(profile, file):
            return FileResult(False, error='Permission denied', status_code=403)

        user_ids = list(dict.fromkeys(str(u) for u in user_ids if u))
        previous = set(self.permission_repo.user_ids_for_file(file_id))
        self.permission_repo.replace(file_id, user_ids, permission)

        self.activity_repo.try_log('file_shared', profile.id, org_id=profile.org_id,
                                   resource_type='file', resource_id=file_id, details={
                                       'file_name': file['name'],
                                       'shared_with_count': len(user_ids),
                                   })
        notify_users([u for u in user_ids if u not in previous and u != profile.id],
                     'File shared with you', type='file_shared',
                     message=f"{profile.full_name or profile.email} shared {file['name']}",
                     action_url=FILES_URL, resource_type='file', resource_id=file_id,
                     org_id=file['org_id'])
        return FileResult(True, data={'message': f'File shared with {len(user_ids)} user(s)'})

    def list_permissions(self, profile, file_id) -> FileResult:
        file = self.file_repo.get_by_id(file_id)
        if not file:
            return FileResult(False, error='File not found', status_code=404)
        if not (permissions.is_admin(profile) or permissions.can_edit_file(profile, file)):
            return FileResult(False, error='Permission denied', status_code=403)
        return FileResult(True, data=self.permission_repo.list_for_file(file_id))

    # ── Delete ──

    def delete(self, profile, file_id) -> FileResult:
        file = self.file_repo.get_by_id(file_id)
        if not file:
            return FileResult(False, error='File not found', status_code=404)
        if not permissions.can_delete_file(profile, file):
            return FileResult(False, error='Permission denied', status_code=403)

        try:
            self.storage.remove([file['storage_path']])
        except SupabaseError as e:
            logger.error(f"Storage delete failed for {file['storage_path']}: {e}")
            return FileResult(False, error='Failed to delete file from storage', status_code=500)

        self.file_repo.delete(file_id)
        self.activity_repo.try_log('file_deleted', profile.id, org_id=file['org_id'],
                                   resource_type='file', resource_id=file_id,
                                   details={'file_name': file['name']})
        return FileResult(True, data={'message': 'File deleted successfully'})

    def _remove_quietly(self, paths):
        try:
            self.storage.remove(paths)
        except SupabaseError as e:
            logger.error(f'Failed to clean up storage objects {paths}: {e}')


def can_use_channel(profile, channel):
    """Team members of the owning org, or members of the client org."""
    if not profile.org_id:
        return False
    if permissions.is_team_role(profile):
        return str(channel['org_id']) == profile.org_id or permissions.is_admin(profile)
    return str(channel['client_org_id']) == profile.org_id
