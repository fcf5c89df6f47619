"""Authorization policy and role-scoped category catalogs."""

from finvue.policy.authorization import (
    GLOBAL_VIEWERS,
    TRANSITION_CAPABILITIES,
    allowed_transitions,
    can_delete_transaction,
    can_delete_user,
    can_manage_settings,
    can_manage_users,
    can_view,
    is_global_viewer,
)
from finvue.policy.catalog import (
    ADMIN_ONLY_CATEGORIES,
    DEFAULT_CATEGORIES,
    INCOME_CATEGORIES,
    SUB_CATEGORIES,
    allowed_transaction_types,
    available_categories,
    available_category_names,
    sub_categories_for,
)

__all__ = [
    # Authorization
    "GLOBAL_VIEWERS",
    "TRANSITION_CAPABILITIES",
    "allowed_transitions",
    "can_delete_transaction",
    "can_delete_user",
    "can_manage_settings",
    "can_manage_users",
    "can_view",
    "is_global_viewer",
    # Catalog
    "ADMIN_ONLY_CATEGORIES",
    "DEFAULT_CATEGORIES",
    "INCOME_CATEGORIES",
    "SUB_CATEGORIES",
    "allowed_transaction_types",
    "available_categories",
    "available_category_names",
    "sub_categories_for",
]
