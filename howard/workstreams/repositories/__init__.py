from .vertical_repository import VerticalRepository
from .template_repository import TemplateRepository
from .workstream_repository import WorkstreamRepository
from .entry_repository import EntryRepository

__all__ = ['VerticalRepository', 'TemplateRepository', 'WorkstreamRepository', 'EntryRepository']
