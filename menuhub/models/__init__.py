# Import all models so SQLAlchemy metadata is populated for Alembic autogenerate
from menuhub.models.enums import AssignmentType, CatalogPartition, MenuCategory, UserRole
from menuhub.models.menu_item import MenuItem
from menuhub.models.user_menu import UserMenuAssignment

__all__ = [
    "AssignmentType",
    "CatalogPartition",
    "MenuCategory",
    "MenuItem",
    "UserMenuAssignment",
    "UserRole",
]
