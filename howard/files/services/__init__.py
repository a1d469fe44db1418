from .file_service import FileService, FileResult
from .channel_service import ChannelService

__all__ = ['FileService', 'FileResult', 'ChannelService']
