from datetime import date
from decimal import Decimal

from tourdesk.models import TaxSlab, HotelPricing, AuditLog, Image


def test_lookup_kinds_and_listing(client, masters, admin_headers):
    kinds = client.get("/api/v1/settings", headers=admin_headers).json()["kinds"]
    assert "meal-plans" in kinds
    assert "tax-slabs" in kinds

    meal_plans = client.get("/api/v1/settings/meal-plans", headers=admin_headers).json()
    assert [m["code"] for m in meal_plans] == ["CP"]


def test_unknown_lookup_kind_is_404(client, admin_headers):
    response = client.get("/api/v1/settings/planets", headers=admin_headers)
    assert response.status_code == 404
    assert response.json()["detail"] == "Unknown settings type 'planets'"


def test_create_lookup_ignores_foreign_columns(client, db, masters, admin_headers):
    response = client.post("/api/v1/settings/tax-slabs", headers=admin_headers, json={
        "name": "GST 18%", "percentage": "18", "max_persons": 4,
    })
    assert response.status_code == 200
    assert response.json()["percentage"] == 18.0
    assert "max_persons" not in response.json()

    duplicate = client.post("/api/v1/settings/tax-slabs", headers=admin_headers, json={"name": "GST 18%"})
    assert duplicate.status_code == 400
    assert duplicate.json()["detail"] == "'GST 18%' already exists"


def test_rename_to_existing_name_is_rejected(client, masters, admin_headers):
    created = client.post("/api/v1/settings/room-types", headers=admin_headers, json={"name": "Suite"}).json()
    response = client.patch(f"/api/v1/settings/room-types/{created['id']}", headers=admin_headers,
                            json={"name": "Deluxe"})
    assert response.status_code == 400


def test_unused_lookup_is_deleted(client, db, masters, admin_headers):
    slab_id = masters['gst'].id
    response = client.delete(f"/api/v1/settings/tax-slabs/{slab_id}", headers=admin_headers)
    assert response.json()["status"] == "deleted"
    assert db.query(TaxSlab).filter(TaxSlab.id == slab_id).first() is None


def test_lookup_in_use_is_deactivated(client, db, masters, admin_headers):
    db.add(HotelPricing(
        hotel_id=masters['hotel'].id, room_type_id=masters['room_type'].id,
        occupancy_type_id=masters['occupancy'].id, meal_plan_id=masters['meal_plan'].id,
        price=Decimal("3000"), start_date=date(2024, 1, 1), end_date=date(2024, 12, 31)
    ))
    db.commit()

    response = client.delete(f"/api/v1/settings/meal-plans/{masters['meal_plan'].id}", headers=admin_headers)
    assert response.status_code == 200
    assert response.json()["status"] == "deactivated"

    assert client.get("/api/v1/settings/meal-plans", headers=admin_headers).json() == []
    inactive = client.get("/api/v1/settings/meal-plans", headers=admin_headers,
                          params={"include_inactive": True}).json()
    assert inactive[0]["is_active"] is False
    assert db.query(AuditLog).filter(AuditLog.resource_type == "MealPlan").count() == 1


def test_settings_writes_need_operations_role(client, masters, operations_headers, accounts_headers):
    assert client.post("/api/v1/settings/units", headers=accounts_headers,
                       json={"name": "Night"}).status_code == 403
    assert client.post("/api/v1/settings/units", headers=operations_headers,
                       json={"name": "Night", "abbreviation": "nt"}).status_code == 200


def test_location_and_hotel_in_use_cannot_be_deleted(client, masters, admin_headers):
    location = client.delete(f"/api/v1/locations/{masters['location'].id}", headers=admin_headers)
    assert location.status_code == 400

    unused = client.delete(f"/api/v1/hotels/{masters['other_hotel'].id}", headers=admin_headers)
    assert unused.status_code == 200
    assert client.get(f"/api/v1/hotels/{masters['other_hotel'].id}", headers=admin_headers).status_code == 404


def test_customer_with_financial_records_cannot_be_deleted(client, masters, admin_headers):
    client.post("/api/v1/receipts", headers=admin_headers, json={
        "customer_id": masters['customer'].id, "receipt_date": "2024-03-01",
        "amount": "100", "cash_account_id": masters['cash'].id,
    })
    response = client.delete(f"/api/v1/crm/customers/{masters['customer'].id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot delete customer with existing financial records"

    fresh = client.post("/api/v1/crm/customers", headers=admin_headers, json={"name": "Ravi Menon"}).json()
    assert client.delete(f"/api/v1/crm/customers/{fresh['id']}", headers=admin_headers).status_code == 200


def test_images_attach_to_and_detach_from_a_hotel(client, db, masters, admin_headers):
    path = f"/api/v1/hotels/{masters['hotel'].id}/images"
    response = client.post(path, headers=admin_headers, json={"url": "https://cdn.example.com/sea-breeze.jpg"})
    assert response.status_code == 200
    image = response.json()
    assert image['url'] == "https://cdn.example.com/sea-breeze.jpg"

    hotel = client.get(f"/api/v1/hotels/{masters['hotel'].id}", headers=admin_headers).json()
    assert hotel['images'] == [image]

    elsewhere = client.delete(f"/api/v1/hotels/{masters['other_hotel'].id}/images/{image['id']}", headers=admin_headers)
    assert elsewhere.status_code == 404

    assert client.delete(f"{path}/{image['id']}", headers=admin_headers).status_code == 200
    assert db.query(Image).count() == 0


def test_image_routes_check_owner_kind_and_permission(client, masters, admin_headers, accounts_headers):
    payload = {"url": "https://cdn.example.com/a.jpg"}
    assert client.post("/api/v1/boats/1/images", headers=admin_headers, json=payload).status_code == 404
    assert client.post("/api/v1/hotels/9999/images", headers=admin_headers, json=payload).status_code == 404

    response = client.post(f"/api/v1/locations/{masters['location'].id}/images", headers=accounts_headers, json=payload)
    assert response.status_code == 403
    assert response.json()["detail"] == "Missing required permissions: locations:edit"


def test_rate_windows_must_not_end_before_they_start(client, masters, admin_headers):
    response = client.post(f"/api/v1/hotels/{masters['hotel'].id}/pricing", headers=admin_headers, json={
        "room_type_id": masters['room_type'].id, "occupancy_type_id": masters['occupancy'].id,
        "start_date": "2024-06-30", "end_date": "2024-06-01", "price": "3000",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "End date must be on or after start date"

    response = client.post("/api/v1/transport-pricing", headers=admin_headers, json={
        "location_id": masters['location'].id, "vehicle_type_id": masters['vehicle'].id,
        "start_date": "2024-06-30", "end_date": "2024-06-01", "price": "2000",
    })
    assert response.status_code == 400

    created = client.post("/api/v1/transport-pricing", headers=admin_headers, json={
        "location_id": masters['location'].id, "vehicle_type_id": masters['vehicle'].id,
        "start_date": "2024-06-01", "end_date": "2024-06-30", "price": "2000",
    }).json()
    moved = client.patch(f"/api/v1/transport-pricing/{created['id']}", headers=admin_headers,
                         json={"end_date": "2024-05-01"})
    assert moved.status_code == 400
