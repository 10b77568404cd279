from datetime import date
from decimal import Decimal
from io import BytesIO

from openpyxl import load_workbook

from tourdesk.services import document_service
from tourdesk.services.document_service import DocumentService, render_template


def test_voucher_template_shows_totals_and_words():
    voucher = {
        'title': "Sales Invoice", 'number': "INV-7", 'date': date(2024, 3, 1),
        'party_label': "Bill To", 'party': {'name': "Asha Rao", 'address': None, 'contact': None,
                                            'email': None, 'gstin': "29ABCDE1234F1Z5"},
        'tour_package_query': "TPQ-0001 - Goa Getaway",
        'details': [("Due Date", date(2024, 3, 15)), ("Place of Supply", None)],
        'items': [{'product_name': "Hotel stay", 'description': None, 'quantity': Decimal("2"),
                   'price_per_unit': Decimal("1000"), 'tax_amount': Decimal("100"),
                   'total_amount': Decimal("2100")}],
        'subtotal': Decimal("2000"), 'gst_amount': Decimal("100"), 'gst_percentage': Decimal("5"),
        'total': Decimal("2100"), 'note': None,
    }
    html = render_template("voucher.html", voucher=voucher, amount_words="Rupees Two Thousand One Hundred Only")

    assert "INV-7" in html
    assert "15-03-2024" in html
    assert "Place of Supply" not in html
    assert "GSTIN: 29ABCDE1234F1Z5" in html
    assert "2,100.00" in html
    assert "Rupees Two Thousand One Hundred Only" in html


def test_sale_voucher_download(client, masters, tour_query, admin_headers, rendered):
    sale = client.post("/api/v1/sales", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "customer_id": masters['customer'].id,
        "sale_date": "2024-03-01", "invoice_number": "INV-42", "sale_price": "2000",
        "items": [{"product_name": "Hotel stay", "quantity": "2", "price_per_unit": "1000",
                   "tax_slab_id": masters['gst'].id}],
    }).json()
    assert sale['items'][0]['tax_amount'] == 100.0
    assert sale['items'][0]['total_amount'] == 2100.0

    response = client.get(f"/api/v1/sales/{sale['id']}/voucher", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert response.headers["content-disposition"] == "attachment; filename=sale_voucher_INV-42.pdf"
    assert response.content.startswith(b"%PDF")

    html = rendered[0]
    assert "Sales Invoice" in html
    assert "Asha Rao" in html
    assert "TPQ-0001 - Goa Getaway" in html


def test_receipt_voucher_names_the_account(client, masters, admin_headers, rendered):
    receipt = client.post("/api/v1/receipts", headers=admin_headers, json={
        "customer_id": masters['customer'].id, "receipt_date": "2024-03-03",
        "amount": "1250.50", "bank_account_id": masters['bank'].id,
    }).json()
    response = client.get(f"/api/v1/receipts/{receipt['id']}/voucher", headers=admin_headers)
    assert response.status_code == 200
    assert "HDFC Current" in rendered[0]
    assert "Rupees One Thousand Two Hundred Fifty and Fifty Paise Only" in rendered[0]


def test_query_pdf_lists_the_itinerary(client, masters, admin_headers, rendered):
    query = client.post("/api/v1/tour-package-queries", headers=admin_headers, json={
        "tour_package_query_name": "Goa Honeymoon",
        "location_id": masters['location'].id,
        "customer_name": "Asha Rao",
        "inclusions": ["Breakfast"],
        "itineraries": [{"itinerary_title": "Arrival", "location_id": masters['location'].id,
                         "hotel_id": masters['hotel'].id,
                         "activities": [{"activity_title": "Sunset cruise"}]}],
    }).json()

    response = client.get(f"/api/v1/tour-package-queries/{query['id']}/pdf", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-disposition"] == (
        f"attachment; filename={query['tour_package_query_number']}.pdf"
    )
    html = rendered[0]
    assert "Goa Honeymoon" in html
    assert "Sea Breeze" in html
    assert "Sunset cruise" in html
    assert "Breakfast" in html


def test_missing_voucher_is_404(client, admin_headers, rendered):
    assert client.get("/api/v1/payments/999/voucher", headers=admin_headers).status_code == 404
    assert rendered == []


def test_book_workbook_layout():
    book = {
        'account_name': "Petty Cash", 'account_type': "cash",
        'start_date': "2024-03-01", 'end_date': None,
        'opening_balance': 200.0, 'total_inflow': 100.0, 'total_outflow': 50.0, 'closing_balance': 250.0,
        'transactions': [
            {'date': "2024-03-02", 'type': "Income", 'description': "Commission", 'reference': None,
             'inflow': 100.0, 'outflow': 0.0, 'balance': 300.0},
            {'date': "2024-03-04", 'type': "Expense", 'description': "Office", 'reference': None,
             'inflow': 0.0, 'outflow': 50.0, 'balance': 250.0},
        ],
    }
    content = DocumentService().book_workbook(book)
    assert content[:2] == b"PK"

    sheet = load_workbook(BytesIO(content)).active
    assert sheet.title == "Cash Book - Petty Cash"
    assert sheet["A4"].value == "Period"
    assert sheet["B4"].value == "2024-03-01 to Present"
    assert sheet["B5"].value == 200.0
    assert [cell.value for cell in sheet[8]] == [
        'Date', 'Type', 'Description', 'Reference', 'Inflow', 'Outflow', 'Balance'
    ]
    assert sheet["E9"].number_format == "#,##0.00"
    assert sheet["C11"].value == "TOTAL"
    assert sheet["G11"].value == 250.0


def test_book_export_download(client, masters, admin_headers):
    response = client.get(f"/api/v1/cash-book/{masters['cash'].id}/export", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-type"] == document_service.XLSX_MEDIA_TYPE
    assert response.headers["content-disposition"].startswith("attachment; filename=cash_book_Petty_Cash_")
    assert load_workbook(BytesIO(response.content)).active["A2"].value == "Cash Book - Petty Cash"


def test_profit_export_download(client, masters, tour_query, admin_headers):
    response = client.get("/api/v1/reports/profit/export", headers=admin_headers)
    assert response.status_code == 200
    sheet = load_workbook(BytesIO(response.content)).active
    assert sheet.title == "Profit Report"
