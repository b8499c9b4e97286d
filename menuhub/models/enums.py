import enum


class MenuCategory(str, enum.Enum):
    SPIRITS = "spirits"
    WINE = "wine"
    BEER = "beer"
    COCKTAILS = "cocktails"
    MIXERS = "mixers"


class AssignmentType(str, enum.Enum):
    ALL_USERS = "all_users"
    SPECIFIC_USERS = "specific_users"


class CatalogPartition(str, enum.Enum):
    DRAFT = "draft"
    LIVE = "live"

    @property
    def is_draft(self) -> bool:
        return self is CatalogPartition.DRAFT


class UserRole(str, enum.Enum):
    ADMIN = "admin"
    CUSTOMER = "customer"
