# API v1 Package
from tourdesk.api.v1 import (
    auth, users, audit_logs, settings, locations, hotels, transport_pricing, images, crm,
    inquiries, tour_packages, tour_package_queries, pricing, sales, purchases, receipts, payments, tds,
    expenses, incomes, banking, cashbook, reports
)

__all__ = [
    'auth',
    'users',
    'audit_logs',
    'settings',
    'locations',
    'hotels',
    'transport_pricing',
    'images',
    'crm',
    'inquiries',
    'tour_packages',
    'tour_package_queries',
    'pricing',
    'sales',
    'purchases',
    'receipts',
    'payments',
    'tds',
    'expenses',
    'incomes',
    'banking',
    'cashbook',
    'reports',
]
