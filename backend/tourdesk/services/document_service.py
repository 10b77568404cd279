"""
Document Service - PDF vouchers and query documents, Excel workbooks
"""
from typing import Optional, List, Dict, Sequence
from decimal import Decimal
from datetime import datetime
from io import BytesIO
from pathlib import Path
import logging

from jinja2 import Environment, FileSystemLoader, select_autoescape
from openpyxl import Workbook
from openpyxl.styles import Font, Alignment, PatternFill, Border, Side
from openpyxl.utils import get_column_letter

from tourdesk.core.config import settings
from tourdesk.models import (
    SaleDetail, SaleReturn, PurchaseDetail, PurchaseReturn, ReceiptDetail,
    PaymentDetail, TourPackageQuery
)
from tourdesk.services.common import to_decimal, round2

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates" / "pdf"

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
MONEY_FORMAT = '#,##0.00'

_ONES = [
    "", "One", "Two", "Three", "Four", "Five", "Six", "Seven", "Eight", "Nine", "Ten",
    "Eleven", "Twelve", "Thirteen", "Fourteen", "Fifteen", "Sixteen", "Seventeen",
    "Eighteen", "Nineteen",
]
_TENS = ["", "", "Twenty", "Thirty", "Forty", "Fifty", "Sixty", "Seventy", "Eighty", "Ninety"]


def _below_thousand(number: int) -> str:
    words = []
    if number >= 100:
        words.append(f"{_ONES[number // 100]} Hundred")
        number %= 100
    if number >= 20:
        words.append(_TENS[number // 10])
        number %= 10
    if number:
        words.append(_ONES[number])
    return " ".join(words)


def number_to_words(number: int) -> str:
    """Whole number in words using the crore/lakh grouping"""
    if number == 0:
        return "Zero"
    parts = []
    for divisor, label in ((10_000_000, "Crore"), (100_000, "Lakh"), (1000, "Thousand")):
        if number >= divisor:
            chunk = number // divisor
            chunk_words = number_to_words(chunk) if chunk >= 1000 else _below_thousand(chunk)
            parts.append(f"{chunk_words} {label}")
            number %= divisor
    if number:
        parts.append(_below_thousand(number))
    return " ".join(parts)


def amount_in_words(amount) -> str:
    value = round2(amount)
    rupees = int(value)
    paise = int((value - rupees) * 100)
    words = f"Rupees {number_to_words(rupees)}"
    if paise:
        words += f" and {number_to_words(paise)} Paise"
    return f"{words} Only"


def money(value) -> str:
    return f"{float(to_decimal(value)):,.2f}"


_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"])
)
_env.filters["money"] = money


def render_template(name: str, **context) -> str:
    context.setdefault("company", company_info())
    context.setdefault("currency", settings.CURRENCY_SYMBOL)
    context.setdefault("now", datetime.now())
    return _env.get_template(name).render(**context)


def html_to_pdf(html: str) -> bytes:
    from weasyprint import HTML

    return HTML(string=html, base_url=str(TEMPLATE_DIR)).write_pdf()


def company_info() -> Dict[str, str]:
    return {
        'name': settings.COMPANY_NAME,
        'address': settings.COMPANY_ADDRESS,
        'phone': settings.COMPANY_PHONE,
        'email': settings.COMPANY_EMAIL,
    }


def _party(record) -> Optional[Dict]:
    if record is None:
        return None
    return {
        'name': record.name,
        'address': record.address,
        'contact': record.contact,
        'email': record.email,
        'gstin': record.gstin,
    }


def _items(items) -> List[Dict]:
    return [
        {
            'product_name': item.product_name,
            'description': item.description,
            'quantity': item.quantity,
            'price_per_unit': item.price_per_unit,
            'tax_amount': item.tax_amount or Decimal("0"),
            'total_amount': item.total_amount,
        }
        for item in items
    ]


def _query_label(query: Optional[TourPackageQuery]) -> Optional[str]:
    if query is None:
        return None
    if query.tour_package_query_number:
        return f"{query.tour_package_query_number} - {query.tour_package_query_name or ''}".strip(" -")
    return query.tour_package_query_name


class DocumentService:
    """Builds voucher contexts from ledger records and renders them"""

    # ==================== VOUCHERS ====================

    def sale_voucher(self, sale: SaleDetail) -> dict:
        subtotal = to_decimal(sale.sale_price)
        gst = to_decimal(sale.gst_amount)
        return {
            'title': "Sales Invoice",
            'number': sale.invoice_number or f"SALE-{sale.id}",
            'date': sale.invoice_date or sale.sale_date,
            'party_label': "Bill To",
            'party': _party(sale.customer),
            'tour_package_query': _query_label(sale.tour_package_query),
            'details': [("Due Date", sale.due_date), ("Place of Supply", sale.state_of_supply)],
            'items': _items(sale.items),
            'subtotal': subtotal,
            'gst_amount': gst,
            'gst_percentage': sale.gst_percentage,
            'total': subtotal + gst,
            'note': sale.description,
        }

    def purchase_voucher(self, purchase: PurchaseDetail) -> dict:
        subtotal = to_decimal(purchase.price)
        gst = to_decimal(purchase.gst_amount)
        return {
            'title': "Purchase Bill",
            'number': purchase.bill_number or f"PUR-{purchase.id}",
            'date': purchase.bill_date or purchase.purchase_date,
            'party_label': "Supplier",
            'party': _party(purchase.supplier),
            'tour_package_query': _query_label(purchase.tour_package_query),
            'details': [
                ("Due Date", purchase.due_date),
                ("Place of Supply", purchase.state_of_supply),
                ("Reference", purchase.reference_number),
            ],
            'items': _items(purchase.items),
            'subtotal': subtotal,
            'gst_amount': gst,
            'gst_percentage': purchase.gst_percentage,
            'total': subtotal + gst,
            'note': purchase.description,
        }

    def sale_return_voucher(self, sale_return: SaleReturn) -> dict:
        sale = sale_return.sale_detail
        total = to_decimal(sale_return.amount)
        gst = to_decimal(sale_return.gst_amount)
        return {
            'title': "Credit Note",
            'number': sale_return.reference or f"SR-{sale_return.id}",
            'date': sale_return.return_date,
            'party_label': "Customer",
            'party': _party(sale.customer),
            'tour_package_query': _query_label(sale.tour_package_query),
            'details': [("Against Invoice", sale.invoice_number)],
            'items': _items(sale_return.items),
            'subtotal': total - gst,
            'gst_amount': gst,
            'gst_percentage': None,
            'total': total,
            'note': sale_return.return_reason,
        }

    def purchase_return_voucher(self, purchase_return: PurchaseReturn) -> dict:
        purchase = purchase_return.purchase_detail
        total = to_decimal(purchase_return.amount)
        gst = to_decimal(purchase_return.gst_amount)
        return {
            'title': "Debit Note",
            'number': purchase_return.reference or f"PR-{purchase_return.id}",
            'date': purchase_return.return_date,
            'party_label': "Supplier",
            'party': _party(purchase.supplier),
            'tour_package_query': _query_label(purchase.tour_package_query),
            'details': [("Against Bill", purchase.bill_number)],
            'items': _items(purchase_return.items),
            'subtotal': total - gst,
            'gst_amount': gst,
            'gst_percentage': None,
            'total': total,
            'note': purchase_return.return_reason,
        }

    def receipt_voucher(self, receipt: ReceiptDetail) -> dict:
        account = receipt.bank_account or receipt.cash_account
        return {
            'title': "Receipt Voucher",
            'number': receipt.reference or f"RCPT-{receipt.id}",
            'date': receipt.receipt_date,
            'party_label': "Received From",
            'party': _party(receipt.customer),
            'tour_package_query': _query_label(receipt.tour_package_query),
            'details': [
                ("Received In", account.account_name if account else None),
                ("Receipt Type", receipt.receipt_type),
            ],
            'items': [],
            'subtotal': to_decimal(receipt.amount),
            'gst_amount': Decimal("0"),
            'gst_percentage': None,
            'total': to_decimal(receipt.amount),
            'note': receipt.note,
        }

    def payment_voucher(self, payment: PaymentDetail) -> dict:
        account = payment.bank_account or payment.cash_account
        return {
            'title': "Payment Voucher",
            'number': payment.transaction_id or f"PAY-{payment.id}",
            'date': payment.payment_date,
            'party_label': "Paid To",
            'party': _party(payment.supplier),
            'tour_package_query': _query_label(payment.tour_package_query),
            'details': [
                ("Paid From", account.account_name if account else None),
                ("Method", payment.method),
            ],
            'items': [],
            'subtotal': to_decimal(payment.amount),
            'gst_amount': Decimal("0"),
            'gst_percentage': None,
            'total': to_decimal(payment.amount),
            'note': payment.note,
        }

    def render_voucher(self, voucher: dict) -> bytes:
        html = render_template(
            "voucher.html",
            voucher=voucher,
            amount_words=amount_in_words(voucher['total'])
        )
        logger.info(f"Rendering voucher {voucher['title']} {voucher['number']}")
        return html_to_pdf(html)

    # ==================== TOUR PACKAGE QUERY ====================

    def render_tour_package_query(self, query: TourPackageQuery) -> bytes:
        html = render_template("tour_package_query.html", query=query)
        logger.info(f"Rendering tour package query {query.id}")
        return html_to_pdf(html)

    # ==================== EXCEL ====================

    def build_workbook(self, title: str, headers: Sequence[str], rows: List[Sequence],
                       money_columns: Sequence[int] = (), summary: List[tuple] = None,
                       totals: Sequence = None) -> bytes:
        """
        Single sheet workbook: title, optional (label, value) summary lines,
        a bold header row, data rows and an optional bold totals row.
        money_columns are 1-based column indexes formatted as #,##0.00.
        """
        wb = Workbook()
        ws = wb.active
        ws.title = title[:31]

        header_font = Font(bold=True, color="FFFFFF", size=11)
        header_fill = PatternFill(start_color="1e40af", end_color="1e40af", fill_type="solid")
        total_fill = PatternFill(start_color="f3f4f6", end_color="f3f4f6", fill_type="solid")
        thin_border = Border(
            left=Side(style='thin'),
            right=Side(style='thin'),
            top=Side(style='thin'),
            bottom=Side(style='thin')
        )

        ws['A1'] = settings.COMPANY_NAME
        ws['A1'].font = Font(bold=True, size=14)
        ws['A2'] = title
        ws['A2'].font = Font(bold=True, size=11)

        row = 4
        for label, value in summary or []:
            ws.cell(row=row, column=1, value=label).font = Font(bold=True)
            cell = ws.cell(row=row, column=2, value=value)
            if isinstance(value, (int, float, Decimal)):
                cell.number_format = MONEY_FORMAT
            row += 1
        if summary:
            row += 1

        for col, header in enumerate(headers, 1):
            cell = ws.cell(row=row, column=col, value=header)
            cell.font = header_font
            cell.fill = header_fill
            cell.alignment = Alignment(horizontal='center')
            cell.border = thin_border
        row += 1

        for values in rows:
            for col, value in enumerate(values, 1):
                if isinstance(value, Decimal):
                    value = float(value)
                cell = ws.cell(row=row, column=col, value=value)
                cell.border = thin_border
                if col in money_columns:
                    cell.number_format = MONEY_FORMAT
                    cell.alignment = Alignment(horizontal='right')
            row += 1

        if totals:
            for col, value in enumerate(totals, 1):
                cell = ws.cell(row=row, column=col, value=float(value) if isinstance(value, Decimal) else value)
                cell.font = Font(bold=True)
                cell.fill = total_fill
                cell.border = thin_border
                if col in money_columns:
                    cell.number_format = MONEY_FORMAT

        for col, header in enumerate(headers, 1):
            width = max([len(str(header))] + [len(str(r[col - 1])) for r in rows if len(r) >= col])
            ws.column_dimensions[get_column_letter(col)].width = min(max(width + 2, 12), 50)

        buffer = BytesIO()
        wb.save(buffer)
        return buffer.getvalue()

    def book_workbook(self, book: dict) -> bytes:
        kind = "Bank Book" if book['account_type'] == "bank" else "Cash Book"
        rows = [
            (t['date'], t['type'], t['description'], t['reference'] or '', t['inflow'] or None,
             t['outflow'] or None, t['balance'])
            for t in book['transactions']
        ]
        period = f"{book['start_date'] or 'All'} to {book['end_date'] or 'Present'}"
        return self.build_workbook(
            f"{kind} - {book['account_name']}",
            ['Date', 'Type', 'Description', 'Reference', 'Inflow', 'Outflow', 'Balance'],
            rows,
            money_columns=(5, 6, 7),
            summary=[
                ("Period", period),
                ("Opening Balance", book['opening_balance']),
                ("Closing Balance", book['closing_balance']),
            ],
            totals=('', '', 'TOTAL', '', book['total_inflow'], book['total_outflow'], book['closing_balance'])
        )

    def profit_workbook(self, report: dict) -> bytes:
        rows = [
            (p['tour_package_query_number'] or '', p['tour_package_query_name'] or '', p['customer_name'] or '',
             p['tour_starts_from'], p['sales'], p['purchases'], p['expenses'], p['incomes'],
             p['profit'], p['margin'])
            for p in report['packages']
        ]
        totals = report['totals']
        return self.build_workbook(
            "Profit Report",
            ['Query No', 'Query', 'Customer', 'Tour Start', 'Sales', 'Purchases',
             'Expenses', 'Incomes', 'Profit', 'Margin %'],
            rows,
            money_columns=(5, 6, 7, 8, 9, 10),
            summary=[
                ("Period", f"{report['start_date'] or 'All'} to {report['end_date'] or 'Present'}"),
                ("General Expenses", report['general_expenses']),
                ("General Incomes", report['general_incomes']),
                ("Net Profit", report['net_profit']),
                ("Profitable Packages", f"{report['profitable_count']} of {report['package_count']}"),
            ],
            totals=('', 'TOTAL', '', '', totals['sales'], totals['purchases'], totals['expenses'],
                    totals['incomes'], totals['profit'], report['overall_margin'])
        )
