from .file_repository import FileRepository
from .permission_repository import FilePermissionRepository
from .channel_repository import ChannelRepository
from .folder_repository import FolderRepository

__all__ = ['FileRepository', 'FilePermissionRepository', 'ChannelRepository', 'FolderRepository']
