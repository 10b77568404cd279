"""
Reports API Routes - customer and supplier ledgers, profit and GST
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.services.report_service import ReportService
from tourdesk.services.document_service import DocumentService, XLSX_MEDIA_TYPE
from tourdesk.api.v1.serializers import attachment

router = APIRouter(
    prefix="/reports",
    tags=["Reports"],
    dependencies=[Depends(PermissionChecker(["reports:view"]))]
)


# ==================== LEDGERS ====================

@router.get("/customers/ledger")
async def get_customer_ledger_summary(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Receivable balance per customer"""
    return ReportService(db).get_customer_summary()


@router.get("/customers/{customer_id}/ledger")
async def get_customer_ledger(
    customer_id: int,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    ledger = ReportService(db).get_customer_ledger(customer_id, start_date, end_date)
    if not ledger:
        raise HTTPException(status_code=404, detail="Customer not found")
    return ledger


@router.get("/suppliers/ledger")
async def get_supplier_ledger_summary(
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Payable balance per supplier"""
    return ReportService(db).get_supplier_summary()


@router.get("/suppliers/{supplier_id}/ledger")
async def get_supplier_ledger(
    supplier_id: int,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    ledger = ReportService(db).get_supplier_ledger(supplier_id, start_date, end_date)
    if not ledger:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return ledger


# ==================== PROFIT & GST ====================

@router.get("/profit")
async def get_profit_report(
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Profit per confirmed query with tour start in the range"""
    return ReportService(db).get_profit_report(start_date, end_date)


@router.get("/profit/export")
async def export_profit_report(
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    report = ReportService(db).get_profit_report(start_date, end_date)
    filename = f"profit_report_{datetime.now().strftime('%Y%m%d')}.xlsx"
    return attachment(DocumentService().profit_workbook(report), filename, XLSX_MEDIA_TYPE)


@router.get("/gst")
async def get_gst_report(
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    return ReportService(db).get_gst_report(start_date, end_date)
