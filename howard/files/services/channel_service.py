"""Channel Service - client channels and their folders."""
from core.utils.logging_config import get_logger
from core.auth import permissions
from core.auth.repositories import ActivityRepository
from core.organization.repositories import OrganizationRepository
from core.supabase import get_storage_client
from core.supabase.client import SupabaseError

from ..paths import normalize_folder_path, child_folder_path, validate_folder_name
from ..repositories import ChannelRepository, FolderRepository, FileRepository
from ..repositories.folder_repository import DuplicateFolderError
from .file_service import FileResult, can_use_channel

logger = get_logger('howard.files.channels')


class ChannelService:

    def __init__(self, storage=None):
        self._storage = storage
        self.channel_repo = ChannelRepository()
        self.folder_repo = FolderRepository()
        self.file_repo = FileRepository()
        self.org_repo = OrganizationRepository()
        self.activity_repo = ActivityRepository()

    @property
    def storage(self):
        if self._storage is None:
            self._storage = get_storage_client()
        return self._storage

    def _remove_objects(self, paths):
        if not paths:
            return
        try:
            self.storage.remove(paths)
        except SupabaseError as e:
            logger.error(f'Failed to remove {len(paths)} storage objects: {e}')

    def _owned_channel(self, profile, channel_id):
        """Channel owned by the caller's org, or None."""
        channel = self.channel_repo.get_by_id(channel_id)
        if not channel or str(channel['org_id']) != profile.org_id:
            return None
        return channel

    # ── Channels ──

    def list_channels(self, profile):
        if not profile.org_id:
            return []
        if permissions.is_team_role(profile):
            return self.channel_repo.list_for_team_org(profile.org_id)
        return self.channel_repo.list_for_client_org(profile.org_id)

    def get_channel(self, profile, channel_id) -> FileResult:
        channel = self.channel_repo.get_by_id(channel_id)
        if not channel:
            return FileResult(False, error='Channel not found', status_code=404)
        if not can_use_channel(profile, channel):
            return FileResult(False, error='Access denied', status_code=403)
        return FileResult(True, data=channel)

    def create_channel(self, profile, data) -> FileResult:
        client_org_id = data.get('client_org_id')
        if not client_org_id:
            raise ValueError('client_org_id is required')
        if not profile.org_id:
            raise ValueError('Your profile is not linked to an organization')

        name = (data.get('name') or '').strip()
        if not name:
            client_org = self.org_repo.get_by_id(client_org_id)
            if not client_org:
                return FileResult(False, error='Client organization not found', status_code=404)
            name = client_org['name'] or 'Untitled Channel'
        if len(name) > 200:
            raise ValueError('Channel name must be 200 characters or less')

        if self.channel_repo.find(profile.org_id, client_org_id):
            return FileResult(False, error='A channel already exists for this client', status_code=409)

        channel = self.channel_repo.create(profile.org_id, client_org_id, name,
                                           (data.get('description') or '').strip() or None,
                                           profile.id)
        self.activity_repo.try_log('channel_created', profile.id, org_id=profile.org_id,
                                   resource_type='file_channel', resource_id=channel['id'],
                                   details={'channel_name': name, 'client_org_id': client_org_id})
        return FileResult(True, data=channel, status_code=201)

    def update_channel(self, profile, channel_id, data) -> FileResult:
        if not self._owned_channel(profile, channel_id):
            return FileResult(False, error='Channel not found or access denied', status_code=404)
        fields = {}
        if 'name' in data:
            name = (data.get('name') or '').strip()
            if not name:
                raise ValueError('Channel name cannot be empty')
            fields['name'] = name
        if 'description' in data:
            fields['description'] = (data.get('description') or '').strip() or None
        return FileResult(True, data=self.channel_repo.update(channel_id, fields))

    def delete_channel(self, profile, channel_id) -> FileResult:
        channel = self._owned_channel(profile, channel_id)
        if not channel:
            return FileResult(False, error='Channel not found or access denied', status_code=404)

        self._remove_objects(self.file_repo.storage_paths_for_channel(channel_id))
        self.channel_repo.delete(channel_id)
        self.activity_repo.try_log('channel_deleted', profile.id, org_id=profile.org_id,
                                   resource_type='file_channel', resource_id=channel_id,
                                   details={'channel_name': channel['name']})
        return FileResult(True, data={'message': 'Channel deleted successfully'})

    # ── Folders ──

    def list_folders(self, profile, channel_id, parent_path='/') -> FileResult:
        if not channel_id:
            raise ValueError('channelId is required')
        channel = self.channel_repo.get_by_id(channel_id)
        if not channel or not can_use_channel(profile, channel):
            return FileResult(False, error='Access denied', status_code=403)
        return FileResult(True, data=self.folder_repo.list_for_channel(
            channel_id, normalize_folder_path(parent_path)))

    def create_folder(self, profile, data) -> FileResult:
        channel_id = data.get('channel_id')
        if not channel_id:
            raise ValueError('channel_id is required')
        name = validate_folder_name(data.get('name'))
        parent_path = normalize_folder_path(data.get('parent_path'))

        if not self._owned_channel(profile, channel_id):
            return FileResult(False, error='Channel not found or access denied', status_code=404)
        try:
            folder = self.folder_repo.create(channel_id, name, parent_path, profile.id)
        except DuplicateFolderError:
            return FileResult(False, error='A folder with this name already exists in this location',
                              status_code=409)
        return FileResult(True, data=folder, status_code=201)

    def delete_folder(self, profile, folder_id) -> FileResult:
        folder = self.folder_repo.get_by_id(folder_id)
        if not folder:
            return FileResult(False, error='Folder not found', status_code=404)
        if str(folder['channel_org_id']) != profile.org_id:
            return FileResult(False, error='Access denied', status_code=403)

        folder_path = child_folder_path(folder['parent_path'], folder['name'])
        self._remove_objects(self.file_repo.storage_paths_for_channel(folder['channel_id'], folder_path))
        removed = self.folder_repo.delete_tree(folder, folder_path)
        logger.info(f"Folder {folder_path} deleted from channel {folder['channel_id']} ({removed} files)")
        return FileResult(True, data={'message': 'Folder deleted successfully'})
