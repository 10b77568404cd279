# Services Package
from tourdesk.services.user_service import UserService
from tourdesk.services.permission_service import PermissionService
from tourdesk.services.audit_service import AuditService, AuditAction
from tourdesk.services.settings_service import SettingsService
from tourdesk.services.crm_service import CustomerService, SupplierService
from tourdesk.services.location_service import (
    LocationService, HotelService, TransportPricingService, ImageService
)
from tourdesk.services.tour_package_service import TourPackageService
from tourdesk.services.tour_package_query_service import TourPackageQueryService
from tourdesk.services.pricing_service import PricingService
from tourdesk.services.sales_service import SalesService
from tourdesk.services.purchase_service import PurchaseService
from tourdesk.services.receipt_service import ReceiptService, PaymentService
from tourdesk.services.expense_service import ExpenseService, IncomeService
from tourdesk.services.banking_service import BankingService
from tourdesk.services.cashbook_service import CashBookService
from tourdesk.services.report_service import ReportService
from tourdesk.services.document_service import DocumentService

__all__ = [
    'UserService',
    'PermissionService',
    'AuditService',
    'AuditAction',
    'SettingsService',
    'CustomerService',
    'SupplierService',
    'LocationService',
    'HotelService',
    'TransportPricingService',
    'ImageService',
    'TourPackageService',
    'TourPackageQueryService',
    'PricingService',
    'SalesService',
    'PurchaseService',
    'ReceiptService',
    'PaymentService',
    'ExpenseService',
    'IncomeService',
    'BankingService',
    'CashBookService',
    'ReportService',
    'DocumentService',
]
