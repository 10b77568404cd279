"""
Permission Service - role based access control
"""
from typing import Dict, List, Set

from tourdesk.models import User, UserRole


ACTIONS = ("view", "create", "edit", "delete")

PERMISSION_AREAS = {
    "users": "User management",
    "audit": "Audit trail",
    "settings": "Lookup master data",
    "locations": "Locations and hotels",
    "crm": "Customers and suppliers",
    "tour_packages": "Tour package templates",
    "inquiries": "Customer inquiries",
    "queries": "Tour package queries",
    "pricing": "Price calculators",
    "sales": "Sales and sale returns",
    "purchases": "Purchases and purchase returns",
    "receipts": "Customer receipts",
    "payments": "Supplier payments",
    "expenses": "Expenses",
    "incomes": "Incomes",
    "banking": "Bank and cash accounts",
    "tds": "TDS deductions and challans",
    "reports": "Books, ledgers and reports",
}

FINANCE_AREAS = ("sales", "purchases", "receipts", "payments", "expenses", "incomes", "banking", "tds", "reports")
OPERATIONS_AREAS = ("settings", "locations", "crm", "inquiries", "tour_packages", "queries", "pricing")


def _all_of(areas) -> Set[str]:
    return {f"{area}:{action}" for area in areas for action in ACTIONS}


def _read_only() -> Set[str]:
    return {f"{area}:view" for area in PERMISSION_AREAS if area not in ("users", "audit", "tds")}


ALL_PERMISSIONS: Set[str] = _all_of(PERMISSION_AREAS)

ROLE_PERMISSIONS: Dict[str, Set[str]] = {
    UserRole.ADMIN.value: ALL_PERMISSIONS,
    UserRole.ACCOUNTS.value: _read_only() | _all_of(FINANCE_AREAS),
    UserRole.OPERATIONS.value: _read_only() | _all_of(OPERATIONS_AREAS),
    UserRole.ASSOCIATE.value: _read_only() | {"inquiries:create", "queries:create"},
}


class PermissionService:

    @staticmethod
    def get_user_permissions(user: User) -> Set[str]:
        """Permissions granted through the user's role; admins get everything"""
        if user is None:
            return set()
        if user.is_admin:
            return set(ALL_PERMISSIONS)
        return set(ROLE_PERMISSIONS.get(user.role, set()))

    @staticmethod
    def user_has_permission(user: User, permission_name: str) -> bool:
        return permission_name in PermissionService.get_user_permissions(user)

    @staticmethod
    def get_permissions_by_category() -> Dict[str, List[str]]:
        return {
            area: [f"{area}:{action}" for action in ACTIONS]
            for area in PERMISSION_AREAS
        }
