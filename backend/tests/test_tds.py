from tourdesk.models import TdsChallan, TdsTransaction


def make_payment(client, headers, masters, tour_query, amount="800", payment_date="2024-03-05"):
    response = client.post("/api/v1/payments", headers=headers, json={
        "tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
        "payment_date": payment_date, "amount": amount, "bank_account_id": masters['bank'].id,
    })
    assert response.status_code == 200, response.text
    return response.json()


def withhold(client, headers, payment_id, **overrides):
    payload = {"payment_detail_id": payment_id, "section_code": "194C", "applied_rate": "2", "pan": "ABCDE1234F"}
    payload.update(overrides)
    return client.post("/api/v1/tds/transactions", headers=headers, json=payload)


def test_tds_on_a_payment_follows_its_amount_and_date(client, masters, tour_query, accounts_headers):
    payment = make_payment(client, accounts_headers, masters, tour_query)

    response = withhold(client, accounts_headers, payment['id'])
    assert response.status_code == 200, response.text
    transaction = response.json()
    assert transaction['base_amount'] == 800.0
    assert transaction['tds_amount'] == 16.0
    assert transaction['financial_year'] == "2023-24"
    assert transaction['quarter'] == "Q4"
    assert transaction['status'] == "pending"
    assert transaction['supplier_name'] == "Sea Breeze Hotels"

    override = withhold(client, accounts_headers, payment['id'], section_code="194J",
                        base_amount="500", applied_rate="10", tds_amount="49.50").json()
    assert override['tds_amount'] == 49.5

    detail = client.get(f"/api/v1/payments/{payment['id']}", headers=accounts_headers).json()
    assert detail['tds_deducted'] == 65.5

    listed = client.get("/api/v1/tds/transactions", headers=accounts_headers,
                        params={"financial_year": "2023-24", "quarter": "Q4"}).json()
    assert len(listed) == 2
    assert client.get("/api/v1/tds/transactions", headers=accounts_headers,
                      params={"quarter": "Q1"}).json() == []


def test_tds_for_missing_payment_is_rejected(client, masters, accounts_headers):
    response = withhold(client, accounts_headers, 9999)
    assert response.status_code == 400
    assert response.json()['detail'] == "Payment 9999 not found"


def test_challan_attaches_and_deposits_transactions(client, db, masters, tour_query, accounts_headers):
    payment = make_payment(client, accounts_headers, masters, tour_query)
    first = withhold(client, accounts_headers, payment['id']).json()
    second = withhold(client, accounts_headers, payment['id'], applied_rate="1").json()

    response = client.post("/api/v1/tds/challans", headers=accounts_headers, json={
        "challan_serial_no": "00042", "bsr_code": "0510308", "bank_name": "HDFC",
        "amount": "16", "transaction_ids": [first['id']],
    })
    assert response.status_code == 200, response.text
    challan = response.json()
    assert challan['transaction_count'] == 1
    assert challan['total_tds'] == 16.0
    assert challan['deposited'] is False
    assert [t['status'] for t in challan['transactions']] == ["deposited"]

    other = client.post("/api/v1/tds/challans", headers=accounts_headers, json={"challan_serial_no": "00043"}).json()
    response = client.post(f"/api/v1/tds/challans/{other['id']}/transactions", headers=accounts_headers,
                           json={"transaction_ids": [first['id']]})
    assert response.status_code == 400
    assert "already on challan" in response.json()['detail']

    response = client.post(f"/api/v1/tds/challans/{challan['id']}/transactions", headers=accounts_headers,
                           json={"transaction_ids": [second['id']]})
    assert response.status_code == 200
    assert response.json()['total_tds'] == 24.0

    response = client.post(f"/api/v1/tds/challans/{challan['id']}/deposit", headers=accounts_headers,
                           json={"deposit_date": "2024-04-07"})
    assert response.status_code == 200
    assert response.json()['deposit_date'] == "2024-04-07"
    assert response.json()['deposited'] is True

    listed = client.get("/api/v1/tds/challans", headers=accounts_headers).json()
    assert [c['id'] for c in listed] == [challan['id'], other['id']]
    assert client.get("/api/v1/tds/transactions", headers=accounts_headers,
                      params={"challan_id": challan['id']}).json()[0]['challan_id'] == challan['id']


def test_deposited_tds_is_locked(client, db, masters, tour_query, admin_headers):
    payment = make_payment(client, admin_headers, masters, tour_query)
    transaction = withhold(client, admin_headers, payment['id']).json()
    challan = client.post("/api/v1/tds/challans", headers=admin_headers,
                          json={"transaction_ids": [transaction['id']]}).json()

    response = client.delete(f"/api/v1/tds/challans/{challan['id']}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()['detail'] == "Cannot delete challan with deposited transactions"

    response = client.delete(f"/api/v1/tds/transactions/{transaction['id']}", headers=admin_headers)
    assert response.status_code == 400

    response = client.delete(f"/api/v1/payments/{payment['id']}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()['detail'] == "Cannot delete a payment whose TDS has been deposited"
    assert client.get(f"/api/v1/payments/{payment['id']}", headers=admin_headers).status_code == 200


def test_empty_challan_and_pending_tds_can_be_removed(client, db, masters, tour_query, admin_headers):
    payment = make_payment(client, admin_headers, masters, tour_query)
    transaction = withhold(client, admin_headers, payment['id']).json()
    challan = client.post("/api/v1/tds/challans", headers=admin_headers, json={"challan_serial_no": "7"}).json()

    assert client.delete(f"/api/v1/tds/challans/{challan['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/tds/challans/{challan['id']}", headers=admin_headers).status_code == 404
    assert db.query(TdsChallan).filter(TdsChallan.deleted_at.isnot(None)).count() == 1

    assert client.delete(f"/api/v1/tds/transactions/{transaction['id']}", headers=admin_headers).status_code == 200
    assert db.query(TdsTransaction).count() == 0
    assert client.delete(f"/api/v1/tds/transactions/{transaction['id']}", headers=admin_headers).status_code == 404


def test_pending_tds_goes_with_its_payment(client, db, masters, tour_query, admin_headers):
    payment = make_payment(client, admin_headers, masters, tour_query)
    withhold(client, admin_headers, payment['id'])

    assert client.delete(f"/api/v1/payments/{payment['id']}", headers=admin_headers).status_code == 200
    assert db.query(TdsTransaction).count() == 0


def test_tds_is_for_accounts_only(client, masters, operations_headers, associate_headers):
    assert client.get("/api/v1/tds/challans", headers=operations_headers).status_code == 403
    response = client.get("/api/v1/tds/transactions", headers=associate_headers)
    assert response.status_code == 403
    assert response.json()['detail'] == "Missing required permissions: tds:view"
