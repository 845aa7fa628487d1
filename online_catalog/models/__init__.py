from online_catalog.models.user import LoginMethod, User, UserRole
from online_catalog.models.catalog import THEMES, Catalog, CatalogPlan
from online_catalog.models.category import Category
from online_catalog.models.menu_item import ItemVariant, MenuItem, ProductImage

__all__ = [
    "User",
    "UserRole",
    "LoginMethod",
    "Catalog",
    "CatalogPlan",
    "THEMES",
    "Category",
    "MenuItem",
    "ItemVariant",
    "ProductImage",
]
