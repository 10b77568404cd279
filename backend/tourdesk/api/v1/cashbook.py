"""
Cash Book API Routes - bank book and cash book with running balances
"""
from datetime import date, datetime

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from tourdesk.core.database import get_db
from tourdesk.core.security import get_current_active_user, PermissionChecker
from tourdesk.services.cashbook_service import CashBookService
from tourdesk.services.document_service import DocumentService, XLSX_MEDIA_TYPE
from tourdesk.api.v1.serializers import attachment

router = APIRouter(
    tags=["Cash Book"],
    dependencies=[Depends(PermissionChecker(["reports:view"]))]
)


def book_filename(book: dict) -> str:
    name = book['account_name'].replace(" ", "_")
    return f"{book['account_type']}_book_{name}_{datetime.now().strftime('%Y%m%d')}.xlsx"


@router.get("/books/summary")
async def get_books_summary(
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    """Opening, inflow, outflow and closing for every active account"""
    return CashBookService(db).get_summary(start_date, end_date)


@router.get("/bank-book/{account_id}")
async def get_bank_book(
    account_id: int,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    book = CashBookService(db).get_bank_book(account_id, start_date, end_date)
    if not book:
        raise HTTPException(status_code=404, detail="Bank account not found")
    return book


@router.get("/bank-book/{account_id}/export")
async def export_bank_book(
    account_id: int,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    book = CashBookService(db).get_bank_book(account_id, start_date, end_date)
    if not book:
        raise HTTPException(status_code=404, detail="Bank account not found")
    return attachment(DocumentService().book_workbook(book), book_filename(book), XLSX_MEDIA_TYPE)


@router.get("/cash-book/{account_id}")
async def get_cash_book(
    account_id: int,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    book = CashBookService(db).get_cash_book(account_id, start_date, end_date)
    if not book:
        raise HTTPException(status_code=404, detail="Cash account not found")
    return book


@router.get("/cash-book/{account_id}/export")
async def export_cash_book(
    account_id: int,
    start_date: date = None,
    end_date: date = None,
    db: Session = Depends(get_db),
    current_user = Depends(get_current_active_user)
):
    book = CashBookService(db).get_cash_book(account_id, start_date, end_date)
    if not book:
        raise HTTPException(status_code=404, detail="Cash account not found")
    return attachment(DocumentService().book_workbook(book), book_filename(book), XLSX_MEDIA_TYPE)
