"""
Category Catalog

Role-scoped category lists. Which categories a submitter may pick
depends on the role and on the transaction type:

- INCOME always uses the income catalog
- EMPLOYEE expenses are limited to Conveyance
- ADMIN and MANAGER get the admin-only expense categories on top
"""

from finvue.models.ledger import (
    REQUISITION_CATEGORY,
    Category,
    TransactionType,
    UserRole,
)


# =============================================================================
# CATALOGS
# =============================================================================

DEFAULT_CATEGORIES: tuple[Category, ...] = (
    Category(id="cat_requisition", name=REQUISITION_CATEGORY, icon="ClipboardList", color="#8b5cf6"),
    Category(id="cat_upstream", name="UPSTREAM BILL", icon="ArrowUpCircle", color="#1e293b"),
    Category(id="cat_conveyance", name="Conveyance", icon="MapPin", color="#f59e0b"),
    Category(id="cat_diss_kp", name="Diss-KP", icon="Zap", color="#3b82f6"),
    Category(id="cat_diss_mojurdia", name="Diss-Mojurdia", icon="Zap", color="#3b82f6"),
    Category(id="cat_diss_mohisala", name="Diss-Mohisala", icon="Zap", color="#3b82f6"),
    Category(id="cat_diss_rupdia", name="Diss-Rupdia", icon="Zap", color="#3b82f6"),
    Category(id="cat_food", name="Food", icon="Utensils", color="#f43f5e"),
    Category(id="cat_transport", name="Transport", icon="Car", color="#3b82f6"),
    Category(id="cat_rent", name="Rent", icon="Home", color="#8b5cf6"),
    Category(id="cat_shopping", name="Shopping", icon="ShoppingBag", color="#ec4899"),
    Category(id="cat_bills", name="Bills", icon="FileText", color="#f59e0b"),
    Category(id="cat_ent", name="Entertainment", icon="Gamepad2", color="#10b981"),
    Category(id="cat_other", name="Others", icon="Plus", color="#64748b"),
)

ADMIN_ONLY_CATEGORIES: tuple[Category, ...] = (
    Category(id="cat_family", name="Family", icon="Users", color="#ef4444"),
    Category(id="cat_marjan", name="Marjan", icon="ShieldCheck", color="#8b5cf6"),
    Category(id="cat_admin_own", name="Admin Own", icon="UserCheck", color="#1e293b"),
)

INCOME_CATEGORIES: tuple[Category, ...] = (
    Category(id="inc_agent", name="Agent Bill", icon="Users", color="#8b5cf6"),
    Category(id="inc_abirlink", name="Abirlink Bill", icon="Link", color="#0ea5e9"),
    Category(id="inc_gift", name="Gift", icon="Gift", color="#f43f5e"),
    Category(id="inc_other", name="Other Income", icon="Wallet", color="#64748b"),
)

EMPLOYEE_EXPENSE_CATEGORIES = frozenset({"Conveyance"})

_FAMILY_MEMBERS = ("Bonna", "Ali Ahsan", "Sumna", "Kalamma/Ma")

SUB_CATEGORIES: dict[str, tuple[str, ...]] = {
    "Conveyance": ("Oil", "Bus", "Rikshaw/Van"),
    "Family": _FAMILY_MEMBERS,
    "Marjan": _FAMILY_MEMBERS,
    "Admin Own": _FAMILY_MEMBERS,
}


# =============================================================================
# LOOKUPS
# =============================================================================

def allowed_transaction_types(role: UserRole) -> tuple[TransactionType, ...]:
    """Employees only ever submit expenses."""
    if role == UserRole.EMPLOYEE:
        return (TransactionType.EXPENSE,)
    return (TransactionType.INCOME, TransactionType.EXPENSE)


def available_categories(
    role: UserRole,
    transaction_type: TransactionType,
) -> list[Category]:
    """Categories `role` may pick for a new `transaction_type` entry."""
    if transaction_type == TransactionType.INCOME:
        return list(INCOME_CATEGORIES)

    if role == UserRole.EMPLOYEE:
        return [c for c in DEFAULT_CATEGORIES if c.name in EMPLOYEE_EXPENSE_CATEGORIES]

    categories = list(DEFAULT_CATEGORIES)
    if role in (UserRole.ADMIN, UserRole.MANAGER):
        categories.extend(ADMIN_ONLY_CATEGORIES)
    return categories


def available_category_names(role: UserRole, transaction_type: TransactionType) -> set[str]:
    return {c.name for c in available_categories(role, transaction_type)}


def sub_categories_for(category: str) -> tuple[str, ...]:
    """Sub-categories offered for `category`; empty when it takes none."""
    return SUB_CATEGORIES.get(category, ())
