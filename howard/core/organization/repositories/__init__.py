from .organization_repository import OrganizationRepository, slugify
from .membership_repository import MembershipRepository

__all__ = ['OrganizationRepository', 'MembershipRepository', 'slugify']
