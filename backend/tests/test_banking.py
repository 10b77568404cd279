from decimal import Decimal

from tourdesk.models import AuditLog


def balance(db, account):
    db.refresh(account)
    return Decimal(account.current_balance)


def test_receipt_credits_and_payment_debits(client, db, masters, tour_query, admin_headers):
    bank, cash = masters['bank'], masters['cash']
    receipt = client.post("/api/v1/receipts", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "customer_id": masters['customer'].id,
        "receipt_date": "2024-03-01", "amount": "500", "bank_account_id": bank.id,
    })
    assert receipt.status_code == 200
    assert balance(db, bank) == Decimal("1500")

    payment = client.post("/api/v1/payments", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
        "payment_date": "2024-03-02", "amount": "150", "cash_account_id": cash.id,
    })
    assert payment.status_code == 200
    assert balance(db, cash) == Decimal("50")

    assert db.query(AuditLog).filter(AuditLog.action == "PAYMENT_RECEIVED").count() == 1
    assert db.query(AuditLog).filter(AuditLog.action == "PAYMENT_MADE").count() == 1


def test_posting_needs_exactly_one_account(client, masters, admin_headers):
    both = client.post("/api/v1/receipts", headers=admin_headers, json={
        "receipt_date": "2024-03-01", "amount": "100",
        "bank_account_id": masters['bank'].id, "cash_account_id": masters['cash'].id,
    })
    assert both.status_code == 400
    assert both.json()["detail"] == "Receipt cannot use both a bank account and a cash account"

    neither = client.post("/api/v1/incomes", headers=admin_headers, json={
        "income_date": "2024-03-01", "amount": "100",
    })
    assert neither.status_code == 400
    assert neither.json()["detail"] == "Income requires a bank account or a cash account"


def test_unknown_reference_is_rejected(client, masters, admin_headers):
    response = client.post("/api/v1/receipts", headers=admin_headers, json={
        "receipt_date": "2024-03-01", "amount": "100", "customer_id": 999,
        "bank_account_id": masters['bank'].id,
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "Customer 999 not found"


def test_receipt_update_moves_money_between_accounts(client, db, masters, admin_headers):
    bank, cash = masters['bank'], masters['cash']
    receipt_id = client.post("/api/v1/receipts", headers=admin_headers, json={
        "receipt_date": "2024-03-01", "amount": "300", "bank_account_id": bank.id,
    }).json()["id"]

    response = client.patch(f"/api/v1/receipts/{receipt_id}", headers=admin_headers, json={
        "amount": "250", "bank_account_id": None, "cash_account_id": cash.id,
    })
    assert response.status_code == 200
    assert balance(db, bank) == Decimal("1000")
    assert balance(db, cash) == Decimal("450")

    assert client.delete(f"/api/v1/receipts/{receipt_id}", headers=admin_headers).status_code == 200
    assert balance(db, cash) == Decimal("200")


def test_expense_and_income_postings_revert_on_delete(client, db, masters, admin_headers):
    bank = masters['bank']
    expense = client.post("/api/v1/expenses", headers=admin_headers, json={
        "expense_category_id": masters['expense_category'].id,
        "expense_date": "2024-03-05", "amount": "400", "bank_account_id": bank.id,
    }).json()
    income = client.post("/api/v1/incomes", headers=admin_headers, json={
        "income_category_id": masters['income_category'].id,
        "income_date": "2024-03-05", "amount": "100", "bank_account_id": bank.id,
    }).json()
    assert balance(db, bank) == Decimal("700")

    client.delete(f"/api/v1/expenses/{expense['id']}", headers=admin_headers)
    client.delete(f"/api/v1/incomes/{income['id']}", headers=admin_headers)
    assert balance(db, bank) == Decimal("1000")


def test_accrued_expense_posts_only_when_paid(client, db, masters, admin_headers):
    cash = masters['cash']
    rejected = client.post("/api/v1/expenses", headers=admin_headers, json={
        "expense_date": "2024-03-05", "amount": "80", "is_accrued": True, "cash_account_id": cash.id,
    })
    assert rejected.status_code == 400

    expense = client.post("/api/v1/expenses", headers=admin_headers, json={
        "expense_date": "2024-03-05", "amount": "80", "is_accrued": True,
    })
    assert expense.status_code == 200
    expense_id = expense.json()["id"]
    assert expense.json()["accrued_date"] == "2024-03-05"
    assert balance(db, cash) == Decimal("200")

    listed = client.get("/api/v1/expenses", headers=admin_headers, params={"accrued": True}).json()
    assert [e["id"] for e in listed] == [expense_id]

    direct = client.patch(f"/api/v1/expenses/{expense_id}", headers=admin_headers, json={
        "cash_account_id": cash.id,
    })
    assert direct.status_code == 400
    assert direct.json()["detail"] == "Settle an accrued expense through the pay action"

    paid = client.post(f"/api/v1/expenses/{expense_id}/pay", headers=admin_headers, json={
        "cash_account_id": cash.id, "paid_date": "2024-03-20",
    })
    assert paid.status_code == 200
    assert paid.json()["is_accrued"] is False
    assert balance(db, cash) == Decimal("120")

    again = client.post(f"/api/v1/expenses/{expense_id}/pay", headers=admin_headers, json={
        "cash_account_id": cash.id, "paid_date": "2024-03-21",
    })
    assert again.status_code == 400
    assert again.json()["detail"] == "Expense is not accrued"
    assert db.query(AuditLog).filter(AuditLog.action == "EXPENSE_PAID").count() == 1


def test_transfer_moves_balance_and_reverts(client, db, masters, admin_headers):
    bank, cash = masters['bank'], masters['cash']
    same = client.post("/api/v1/banking/transfers", headers=admin_headers, json={
        "from_bank_account_id": bank.id, "to_bank_account_id": bank.id,
        "transfer_date": "2024-03-01", "amount": "10",
    })
    assert same.status_code == 400
    assert same.json()["detail"] == "Source and destination accounts must be different"

    transfer = client.post("/api/v1/banking/transfers", headers=admin_headers, json={
        "from_bank_account_id": bank.id, "to_cash_account_id": cash.id,
        "transfer_date": "2024-03-01", "amount": "300",
    })
    assert transfer.status_code == 200
    assert balance(db, bank) == Decimal("700")
    assert balance(db, cash) == Decimal("500")

    transfer_id = transfer.json()["id"]
    client.patch(f"/api/v1/banking/transfers/{transfer_id}", headers=admin_headers, json={"amount": "100"})
    assert balance(db, bank) == Decimal("900")
    assert balance(db, cash) == Decimal("300")

    client.delete(f"/api/v1/banking/transfers/{transfer_id}", headers=admin_headers)
    assert balance(db, bank) == Decimal("1000")
    assert balance(db, cash) == Decimal("200")


def test_recalculate_rebuilds_balance_from_history(client, db, masters, admin_headers):
    bank = masters['bank']
    client.post("/api/v1/receipts", headers=admin_headers, json={
        "receipt_date": "2024-03-01", "amount": "250", "bank_account_id": bank.id,
    })
    bank.current_balance = Decimal("5")
    db.commit()

    response = client.post(f"/api/v1/banking/bank-accounts/{bank.id}/recalculate", headers=admin_headers)
    assert response.status_code == 200
    result = response.json()
    assert result["previous_balance"] == 5.0
    assert result["current_balance"] == 1250.0
    assert result["difference"] == 1245.0


def test_opening_balance_edit_shifts_current_balance(client, db, masters, admin_headers):
    cash = masters['cash']
    response = client.patch(f"/api/v1/banking/cash-accounts/{cash.id}", headers=admin_headers, json={
        "opening_balance": "250",
    })
    assert response.status_code == 200
    assert response.json()["current_balance"] == 250.0


def test_account_with_transactions_cannot_be_deleted(client, masters, admin_headers):
    cash = masters['cash']
    client.post("/api/v1/incomes", headers=admin_headers, json={
        "income_date": "2024-03-05", "amount": "10", "cash_account_id": cash.id,
    })
    response = client.delete(f"/api/v1/banking/cash-accounts/{cash.id}", headers=admin_headers)
    assert response.status_code == 400


def test_finance_writes_need_accounts_role(client, masters, operations_headers, accounts_headers):
    payload = {"receipt_date": "2024-03-01", "amount": "10", "bank_account_id": masters['bank'].id}
    assert client.post("/api/v1/receipts", headers=operations_headers, json=payload).status_code == 403
    assert client.post("/api/v1/receipts", headers=accounts_headers, json=payload).status_code == 200
