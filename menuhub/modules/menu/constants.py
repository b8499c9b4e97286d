"""Menu module constants — editable attributes and cache keys."""

# Attributes copied when a live row is cloned into a draft row
ITEM_ATTRIBUTE_FIELDS = (
    "name",
    "ingredients",
    "unit_size",
    "abv",
    "price",
    "image_url",
    "category",
    "in_stock",
    "assignment_type",
)

ABV_MIN = 0
ABV_MAX = 100

# Redis key prefix for per-user visible menus
MENU_CACHE_PREFIX = "menu:user"

# Publish failure step labels
STEP_DELETE = "delete"
STEP_SUPERSEDE = "supersede"
STEP_PROMOTE = "promote"
