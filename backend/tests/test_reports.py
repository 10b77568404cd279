import pytest


@pytest.fixture
def ledger(client, masters, tour_query, admin_headers):
    """A month of activity on the Goa query and the HDFC account"""
    bank, cash = masters['bank'].id, masters['cash'].id

    def post(path, payload):
        response = client.post(f"/api/v1/{path}", headers=admin_headers, json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    post("incomes", {"income_date": "2024-02-20", "amount": "50", "bank_account_id": bank})
    sale = post("sales", {"tour_package_query_id": tour_query.id, "customer_id": masters['customer'].id,
                          "sale_date": "2024-03-01", "invoice_number": "INV-1",
                          "sale_price": "10000", "gst_amount": "500"})
    post("purchases", {"tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
                       "purchase_date": "2024-03-02", "price": "6000", "gst_amount": "300"})
    post("receipts", {"tour_package_query_id": tour_query.id, "customer_id": masters['customer'].id,
                      "receipt_date": "2024-03-03", "amount": "6000", "bank_account_id": bank})
    post("sale-returns", {"sale_detail_id": sale['id'], "return_date": "2024-03-05",
                          "amount": "500", "gst_amount": "25"})
    post("payments", {"tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
                      "payment_date": "2024-03-05", "amount": "5000", "bank_account_id": bank})
    post("expenses", {"tour_package_query_id": tour_query.id, "expense_date": "2024-03-06",
                      "amount": "200", "cash_account_id": cash})
    post("incomes", {"tour_package_query_id": tour_query.id, "income_date": "2024-03-07",
                     "amount": "100", "cash_account_id": cash})
    post("banking/transfers", {"from_bank_account_id": bank, "to_cash_account_id": cash,
                               "transfer_date": "2024-03-10", "amount": "1000"})
    post("expenses", {"expense_category_id": masters['expense_category'].id,
                      "expense_date": "2024-03-15", "amount": "300", "cash_account_id": cash})
    return masters


def test_bank_book_carries_opening_balance_into_range(client, ledger, admin_headers):
    book = client.get(f"/api/v1/bank-book/{ledger['bank'].id}", headers=admin_headers,
                      params={"start_date": "2024-03-01", "end_date": "2024-03-31"}).json()

    assert book['account_type'] == "bank"
    assert book['opening_balance'] == 1050.0
    assert [t['type'] for t in book['transactions']] == ["Receipt", "Payment", "Transfer Out"]
    assert [t['balance'] for t in book['transactions']] == [7050.0, 2050.0, 1050.0]
    assert book['total_inflow'] == 6000.0
    assert book['total_outflow'] == 6000.0
    assert book['closing_balance'] == 1050.0
    assert book['transactions'][0]['description'] == "Receipt from Asha Rao for Goa Getaway"


def test_cash_book_closing_matches_account_balance(client, db, ledger, admin_headers):
    book = client.get(f"/api/v1/cash-book/{ledger['cash'].id}", headers=admin_headers).json()
    assert [t['type'] for t in book['transactions']] == ["Expense", "Income", "Transfer In", "Expense"]
    assert book['transactions'][3]['description'] == "Office"

    db.refresh(ledger['cash'])
    assert book['closing_balance'] == float(ledger['cash'].current_balance) == 800.0


def test_books_summary_lists_every_active_account(client, ledger, admin_headers):
    summary = client.get("/api/v1/books/summary", headers=admin_headers).json()
    by_name = {s['account_name']: s for s in summary}
    assert by_name["HDFC Current"]['entries_count'] == 4
    assert by_name["Petty Cash"]['closing_balance'] == 800.0


def test_unknown_book_is_404(client, masters, admin_headers):
    assert client.get("/api/v1/bank-book/999", headers=admin_headers).status_code == 404


def test_customer_ledger_runs_balance_by_date(client, ledger, admin_headers):
    result = client.get(f"/api/v1/reports/customers/{ledger['customer'].id}/ledger", headers=admin_headers).json()
    assert [e['type'] for e in result['entries']] == ["Sale", "Receipt", "Sale Return"]
    assert [e['balance'] for e in result['entries']] == [10500.0, 4500.0, 4000.0]
    assert result['total_debit'] == 10500.0
    assert result['total_credit'] == 6500.0
    assert result['balance'] == 4000.0

    summary = client.get("/api/v1/reports/customers/ledger", headers=admin_headers).json()
    assert summary[0]['balance'] == 4000.0


def test_supplier_ledger_shows_amount_owed(client, ledger, admin_headers):
    result = client.get(f"/api/v1/reports/suppliers/{ledger['supplier'].id}/ledger", headers=admin_headers).json()
    assert [e['type'] for e in result['entries']] == ["Purchase", "Payment"]
    assert result['entries'][0]['credit'] == 6300.0
    assert result['entries'][1]['debit'] == 5000.0
    assert result['balance'] == 1300.0


def test_profit_report_includes_general_expenses(client, ledger, admin_headers):
    report = client.get("/api/v1/reports/profit", headers=admin_headers,
                        params={"start_date": "2024-03-01", "end_date": "2024-03-31"}).json()

    package = report['packages'][0]
    assert package['tour_package_query_number'] == "TPQ-0001"
    assert package['profit'] == 3900.0
    assert package['margin'] == 39.0
    assert report['general_expenses'] == 300.0
    assert report['net_profit'] == 3600.0
    assert report['profitable_count'] == 1
    assert report['monthly']["2024-03"]['packages'] == 1

    empty = client.get("/api/v1/reports/profit", headers=admin_headers,
                       params={"start_date": "2024-04-01", "end_date": "2024-04-30"}).json()
    assert empty['packages'] == []
    assert empty['profitable_percentage'] == 0.0


def test_profit_margin_and_months_include_general_entries(client, masters, tour_query, admin_headers):
    cash = masters['cash'].id

    def post(path, payload):
        response = client.post(f"/api/v1/{path}", headers=admin_headers, json=payload)
        assert response.status_code == 200, response.text

    post("sales", {"tour_package_query_id": tour_query.id, "customer_id": masters['customer'].id,
                   "sale_date": "2024-03-01", "sale_price": "1000"})
    post("purchases", {"tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
                       "purchase_date": "2024-03-02", "price": "500"})
    post("expenses", {"tour_package_query_id": tour_query.id, "expense_date": "2024-03-04",
                      "amount": "50", "cash_account_id": cash})
    post("expenses", {"expense_category_id": masters['expense_category'].id,
                      "expense_date": "2024-03-20", "amount": "100", "cash_account_id": cash})
    post("incomes", {"income_category_id": masters['income_category'].id,
                     "income_date": "2024-04-02", "amount": "30", "cash_account_id": cash})

    report = client.get("/api/v1/reports/profit", headers=admin_headers,
                        params={"start_date": "2024-03-01", "end_date": "2024-04-30"}).json()

    assert report['packages'][0]['profit'] == 450.0
    assert report['net_profit'] == 380.0
    assert report['overall_margin'] == 38.0
    assert report['monthly']["2024-03"]['expenses'] == 150.0
    assert report['monthly']["2024-03"]['profit'] == 350.0
    assert report['monthly']["2024-04"] == {
        'sales': 0.0, 'purchases': 0.0, 'expenses': 0.0, 'incomes': 30.0, 'profit': 30.0, 'packages': 0,
    }
    assert report['expenses_by_category'] == {"Office": 100.0, "Uncategorized": 50.0}
    assert report['incomes_by_category'] == {"Commission": 30.0}


def test_gst_report_nets_returns(client, ledger, admin_headers):
    report = client.get("/api/v1/reports/gst", headers=admin_headers).json()
    assert report['output_gst'] == 475.0
    assert report['input_gst'] == 300.0
    assert report['net_payable'] == 175.0
    assert [m['month'] for m in report['monthly']] == ["2024-03"]


def test_reports_are_readable_by_every_role(client, masters, operations_headers, associate_headers):
    assert client.get("/api/v1/reports/gst", headers=operations_headers).status_code == 200
    assert client.get("/api/v1/reports/gst", headers=associate_headers).status_code == 200
    response = client.get("/api/v1/reports/gst", headers={"Authorization": "Bearer nope"})
    assert response.status_code == 401
