from online_catalog.core.auth import create_access_token, get_current_user, require_role
from online_catalog.core.errors import CatalogError
from online_catalog.core.logging import get_logger, request_id_ctx

__all__ = [
    "create_access_token",
    "get_current_user",
    "require_role",
    "CatalogError",
    "get_logger",
    "request_id_ctx",
]
