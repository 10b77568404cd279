from tourdesk.models import AuditLog, InquiryAction, TourPackageQuery


def new_inquiry(client, headers, location_id, **overrides):
    payload = {
        "customer_name": "Ravi Menon", "customer_mobile_number": "9800011111",
        "location_id": location_id, "journey_date": "2024-05-01",
        "num_adults": 2, "num_children_5_to_11": 1, "remarks": "Beach hotel preferred",
    }
    payload.update(overrides)
    return client.post("/api/v1/inquiries", headers=headers, json=payload)


def test_inquiry_crud_and_filters(client, db, masters, admin, admin_headers):
    response = new_inquiry(client, admin_headers, masters['location'].id)
    assert response.status_code == 200, response.text
    inquiry = response.json()
    assert inquiry['status'] == "pending"
    assert inquiry['location_label'] == "Goa"
    assert inquiry['created_by'] == admin.username
    assert inquiry['created_by_id'] == admin.id
    assert inquiry['actions'] == []

    other = new_inquiry(client, admin_headers, masters['location'].id,
                        customer_name="Neha Shah", customer_mobile_number="9800022222",
                        status="cancelled").json()

    listed = client.get("/api/v1/inquiries", headers=admin_headers, params={"status": "pending"}).json()
    assert [i['id'] for i in listed] == [inquiry['id']]
    found = client.get("/api/v1/inquiries", headers=admin_headers, params={"search": "22222"}).json()
    assert [i['id'] for i in found] == [other['id']]
    assert client.get("/api/v1/inquiries", headers=admin_headers,
                      params={"start_date": "2999-01-01"}).json() == []

    updated = client.patch(f"/api/v1/inquiries/{inquiry['id']}", headers=admin_headers,
                           json={"status": "confirmed", "num_adults": 3}).json()
    assert updated['status'] == "confirmed"
    assert updated['num_adults'] == 3
    assert updated['customer_name'] == "Ravi Menon"

    assert client.delete(f"/api/v1/inquiries/{other['id']}", headers=admin_headers).status_code == 200
    assert client.get(f"/api/v1/inquiries/{other['id']}", headers=admin_headers).status_code == 404
    actions = [a for (a,) in db.query(AuditLog.action)
               .filter(AuditLog.resource_type == "Inquiry").order_by(AuditLog.id)]
    assert actions == ["CREATE", "CREATE", "UPDATE", "DELETE"]


def test_inquiry_for_unknown_location_is_rejected(client, masters, admin_headers):
    response = new_inquiry(client, admin_headers, 9999)
    assert response.status_code == 400
    assert "Location" in response.json()['detail']


def test_follow_up_actions(client, db, masters, admin_headers):
    inquiry = new_inquiry(client, admin_headers, masters['location'].id).json()

    first = client.post(f"/api/v1/inquiries/{inquiry['id']}/actions", headers=admin_headers, json={
        "action_type": "call", "remarks": "Shared two hotel options", "action_date": "2024-04-01T10:00:00",
    })
    assert first.status_code == 200, first.text
    client.post(f"/api/v1/inquiries/{inquiry['id']}/actions", headers=admin_headers, json={
        "action_type": "whatsapp", "remarks": "Sent itinerary", "action_date": "2024-04-03T09:30:00",
    })

    detail = client.get(f"/api/v1/inquiries/{inquiry['id']}", headers=admin_headers).json()
    assert [a['action_type'] for a in detail['actions']] == ["whatsapp", "call"]

    response = client.delete(f"/api/v1/inquiries/{inquiry['id']}/actions/{first.json()['id']}",
                             headers=admin_headers)
    assert response.status_code == 200
    assert db.query(InquiryAction).count() == 1
    assert client.delete(f"/api/v1/inquiries/{inquiry['id']}/actions/9999",
                         headers=admin_headers).status_code == 404
    assert client.post("/api/v1/inquiries/9999/actions", headers=admin_headers, json={
        "action_type": "call", "remarks": "No one home",
    }).status_code == 404


def test_query_started_from_inquiry(client, db, masters, tour_query, admin_headers):
    inquiry = new_inquiry(client, admin_headers, masters['location'].id).json()

    response = client.post(f"/api/v1/inquiries/{inquiry['id']}/tour-package-query", headers=admin_headers,
                           json={"customer_id": masters['customer'].id, "tour_ends_on": "2024-05-05"})
    assert response.status_code == 200, response.text
    query = response.json()
    assert query['tour_package_query_number'] == "TPQ-00002"
    assert query['tour_package_query_name'] == "Ravi Menon - Goa"
    assert query['inquiry_id'] == inquiry['id']
    assert query['customer_number'] == "9800011111"
    assert query['tour_starts_from'] == "2024-05-01"
    assert query['num_adults'] == "2"
    assert query['num_child_5_to_12'] == "1"

    detail = client.get(f"/api/v1/inquiries/{inquiry['id']}", headers=admin_headers).json()
    assert [q['id'] for q in detail['tour_package_queries']] == [query['id']]

    assert client.delete(f"/api/v1/inquiries/{inquiry['id']}", headers=admin_headers).status_code == 200
    db.expire_all()
    kept = db.query(TourPackageQuery).filter(TourPackageQuery.id == query['id']).one()
    assert kept.inquiry_id is None


def test_query_from_inquiry_checks_dates(client, masters, admin_headers):
    inquiry = new_inquiry(client, admin_headers, masters['location'].id).json()
    response = client.post(f"/api/v1/inquiries/{inquiry['id']}/tour-package-query", headers=admin_headers,
                           json={"tour_ends_on": "2024-04-20"})
    assert response.status_code == 400
    assert client.post("/api/v1/inquiries/9999/tour-package-query", headers=admin_headers,
                       json={}).status_code == 404


def test_inquiry_summary_counts_conversions(client, masters, admin, admin_headers, operations_headers):
    location_id = masters['location'].id
    new_inquiry(client, admin_headers, location_id, status="confirmed")
    new_inquiry(client, admin_headers, location_id)
    new_inquiry(client, operations_headers, location_id, status="cancelled")
    converted = new_inquiry(client, operations_headers, location_id, status="confirmed").json()
    client.post(f"/api/v1/inquiries/{converted['id']}/tour-package-query", headers=admin_headers, json={})

    summary = client.get("/api/v1/inquiries/summary", headers=admin_headers).json()
    assert summary['totals'] == {"total": 4, "pending": 1, "confirmed": 2, "cancelled": 1}
    assert summary['conversion_rate'] == 50.0
    assert summary['with_queries'] == 1
    assert summary['by_location'] == [{
        "location": "Goa", "total": 4, "pending": 1, "confirmed": 2, "cancelled": 1, "conversion_rate": 50.0,
    }]
    by_user = {row['username']: row for row in summary['by_user']}
    assert by_user[admin.username]['total'] == 2
    assert by_user[admin.username]['conversion_rate'] == 50.0
    assert sum(row['total'] for row in summary['by_user']) == 4

    empty = client.get("/api/v1/inquiries/summary", headers=admin_headers,
                       params={"start_date": "2999-01-01"}).json()
    assert empty['totals']['total'] == 0
    assert empty['conversion_rate'] == 0.0


def test_associates_log_inquiries_but_cannot_edit_them(client, masters, associate_headers, admin_headers):
    response = new_inquiry(client, associate_headers, masters['location'].id)
    assert response.status_code == 200
    inquiry_id = response.json()['id']

    response = client.patch(f"/api/v1/inquiries/{inquiry_id}", headers=associate_headers,
                            json={"status": "confirmed"})
    assert response.status_code == 403
    assert client.delete(f"/api/v1/inquiries/{inquiry_id}", headers=associate_headers).status_code == 403
    assert client.get("/api/v1/inquiries", headers=associate_headers).status_code == 200
