from tourdesk.models import AuditLog, PurchaseItem, PurchaseReturn, SaleItem


def test_purchase_lifecycle_and_voucher(client, db, masters, tour_query, admin_headers, rendered):
    response = client.post("/api/v1/purchases", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
        "purchase_date": "2024-03-02", "bill_number": "B-11", "price": "4000", "gst_amount": "200",
        "items": [{"product_name": "Room nights", "quantity": "2", "price_per_unit": "2000",
                   "tax_slab_id": masters['gst'].id}],
    })
    assert response.status_code == 200, response.text
    purchase = response.json()
    assert purchase['supplier_name'] == "Sea Breeze Hotels"
    assert purchase['total_with_gst'] == 4200.0
    assert purchase['items'][0]['tax_amount'] == 200.0

    listed = client.get("/api/v1/purchases", headers=admin_headers,
                        params={"supplier_id": masters['supplier'].id}).json()
    assert [p['id'] for p in listed] == [purchase['id']]

    updated = client.patch(f"/api/v1/purchases/{purchase['id']}", headers=admin_headers,
                           json={"price": "4500", "items": []}).json()
    assert updated['price'] == 4500.0
    assert updated['items'] == []
    assert db.query(PurchaseItem).count() == 0

    response = client.get(f"/api/v1/purchases/{purchase['id']}/voucher", headers=admin_headers)
    assert response.status_code == 200
    assert response.headers["content-disposition"] == "attachment; filename=purchase_voucher_B-11.pdf"
    assert "Purchase Bill" in rendered[0]
    assert "Sea Breeze Hotels" in rendered[0]

    assert client.delete(f"/api/v1/purchases/{purchase['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/purchases/{purchase['id']}", headers=admin_headers).status_code == 404
    actions = [a for (a,) in db.query(AuditLog.action)
               .filter(AuditLog.resource_type == "PurchaseDetail").order_by(AuditLog.id)]
    assert actions == ["CREATE", "UPDATE", "DELETE"]


def test_purchase_for_unknown_supplier_is_rejected(client, masters, admin_headers):
    response = client.post("/api/v1/purchases", headers=admin_headers, json={
        "supplier_id": 9999, "purchase_date": "2024-03-02", "price": "100",
    })
    assert response.status_code == 400


def test_purchase_return_lifecycle_and_debit_note(client, db, masters, tour_query, admin_headers, rendered):
    purchase = client.post("/api/v1/purchases", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "supplier_id": masters['supplier'].id,
        "purchase_date": "2024-03-02", "bill_number": "B-12", "price": "3000",
    }).json()

    response = client.post("/api/v1/purchase-returns", headers=admin_headers, json={
        "purchase_detail_id": purchase['id'], "return_date": "2024-03-04",
        "amount": "525", "gst_amount": "25", "return_reason": "Room downgraded",
    })
    assert response.status_code == 200, response.text
    purchase_return = response.json()
    assert purchase_return['bill_number'] == "B-12"
    assert purchase_return['tour_package_query_id'] == tour_query.id

    listed = client.get("/api/v1/purchase-returns", headers=admin_headers,
                        params={"tour_package_query_id": tour_query.id}).json()
    assert [r['id'] for r in listed] == [purchase_return['id']]

    updated = client.patch(f"/api/v1/purchase-returns/{purchase_return['id']}", headers=admin_headers,
                           json={"reference": "DN-5"}).json()
    assert updated['reference'] == "DN-5"
    assert updated['amount'] == 525.0

    response = client.get(f"/api/v1/purchase-returns/{purchase_return['id']}/voucher", headers=admin_headers)
    assert response.status_code == 200
    assert response.content.startswith(b"%PDF")
    assert "Debit Note" in rendered[0]
    assert "DN-5" in rendered[0]

    response = client.delete(f"/api/v1/purchase-returns/{purchase_return['id']}", headers=admin_headers)
    assert response.status_code == 200
    assert db.query(PurchaseReturn).count() == 0


def test_return_against_missing_purchase_is_rejected(client, masters, admin_headers):
    response = client.post("/api/v1/purchase-returns", headers=admin_headers, json={
        "purchase_detail_id": 9999, "return_date": "2024-03-04", "amount": "10",
    })
    assert response.status_code == 400


def test_sale_patch_replaces_items(client, db, masters, tour_query, admin_headers):
    sale = client.post("/api/v1/sales", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "customer_id": masters['customer'].id,
        "sale_date": "2024-03-01", "sale_price": "3000",
        "items": [
            {"product_name": "Hotel stay", "quantity": "2", "price_per_unit": "1000"},
            {"product_name": "Transfers", "quantity": "1", "price_per_unit": "1000"},
        ],
    }).json()
    assert len(sale['items']) == 2

    response = client.patch(f"/api/v1/sales/{sale['id']}", headers=admin_headers, json={
        "items": [{"product_name": "Hotel stay", "quantity": "3", "price_per_unit": "1000",
                   "tax_slab_id": masters['gst'].id}],
    })
    assert response.status_code == 200, response.text
    items = response.json()['items']
    assert [(i['product_name'], i['quantity'], i['total_amount']) for i in items] == [("Hotel stay", 3.0, 3150.0)]
    assert db.query(SaleItem).count() == 1

    untouched = client.patch(f"/api/v1/sales/{sale['id']}", headers=admin_headers,
                             json={"invoice_number": "INV-9"}).json()
    assert untouched['invoice_number'] == "INV-9"
    assert len(untouched['items']) == 1


def test_purchases_need_accounts_role(client, masters, operations_headers):
    response = client.post("/api/v1/purchases", headers=operations_headers, json={
        "purchase_date": "2024-03-02", "price": "100",
    })
    assert response.status_code == 403
