from decimal import Decimal

import pytest

from tourdesk.models import AuditLog, TourPackageQuery


@pytest.fixture
def package(client, masters, admin_headers):
    """Two day Goa package with a Premium variant priced for two rooms"""
    location_id = masters['location'].id
    response = client.post("/api/v1/tour-packages", headers=admin_headers, json={
        "tour_package_name": "Goa Classic",
        "tour_package_type": "Domestic",
        "location_id": location_id,
        "inclusions": ["Breakfast", "Airport transfers"],
        "itineraries": [
            {"itinerary_title": "Arrival", "location_id": location_id, "hotel_id": masters['hotel'].id,
             "activities": [{"activity_title": "Beach walk"}],
             "room_allocations": [{"room_type_id": masters['room_type'].id,
                                   "occupancy_type_id": masters['occupancy'].id, "quantity": 1}]},
            {"itinerary_title": "North Goa", "location_id": location_id, "hotel_id": masters['hotel'].id},
        ],
        "flight_details": [{"flight_name": "IndiGo", "flight_number": "6E 123"}],
        "images": ["https://img.example.com/goa.jpg"],
    })
    assert response.status_code == 200
    data = response.json()

    variant = client.post(f"/api/v1/tour-packages/{data['id']}/variants", headers=admin_headers, json={
        "name": "Premium",
        "hotel_mappings": [{"itinerary_id": data['itineraries'][0]['id'], "hotel_id": masters['other_hotel'].id}],
    })
    assert variant.status_code == 200

    pricing = client.post(f"/api/v1/tour-packages/{data['id']}/pricing", headers=admin_headers, json={
        "package_variant_id": variant.json()['id'],
        "start_date": "2024-01-01",
        "end_date": "2024-06-30",
        "meal_plan_id": masters['meal_plan'].id,
        "number_of_rooms": 2,
        "components": [
            {"pricing_attribute_id": masters['double_attribute'].id, "price": "5000"},
            {"pricing_attribute_id": masters['extra_bed'].id, "price": "1500"},
        ],
    })
    assert pricing.status_code == 200
    return client.get(f"/api/v1/tour-packages/{data['id']}", headers=admin_headers).json()


def test_package_is_created_with_nested_content(package):
    assert [i['day_number'] for i in package['itineraries']] == [1, 2]
    assert package['itineraries'][0]['activities'][0]['activity_title'] == "Beach walk"
    assert package['itineraries'][0]['room_allocations'][0]['room_type_name'] == "Deluxe"
    assert package['flight_details'][0]['flight_number'] == "6E 123"
    assert package['inclusions'] == ["Breakfast", "Airport transfers"]
    assert package['location_label'] == "Goa"

    variant = package['variants'][0]
    assert variant['is_default'] is True
    assert variant['hotel_mappings'][0]['hotel_name'] == "Palm Grove"
    assert package['pricings'][0]['variant_name'] == "Premium"
    assert len(package['pricings'][0]['components']) == 2


def test_package_pricing_rejects_inverted_window(client, masters, package, admin_headers):
    response = client.post(f"/api/v1/tour-packages/{package['id']}/pricing", headers=admin_headers, json={
        "start_date": "2024-06-30", "end_date": "2024-01-01", "meal_plan_id": masters['meal_plan'].id,
    })
    assert response.status_code == 422


def test_pricing_period_is_scoped_to_its_package(client, package, admin_headers):
    pricing_id = package['pricings'][0]['id']
    own = client.get(f"/api/v1/tour-packages/{package['id']}/pricing/{pricing_id}", headers=admin_headers)
    assert own.status_code == 200
    assert own.json()['number_of_rooms'] == package['pricings'][0]['number_of_rooms']

    other = client.post("/api/v1/tour-packages", headers=admin_headers, json={
        "tour_package_name": "Kerala Backwaters", "location_id": package['location_id'],
    }).json()
    foreign = client.get(f"/api/v1/tour-packages/{other['id']}/pricing/{pricing_id}", headers=admin_headers)
    assert foreign.status_code == 404


def test_only_one_variant_is_default(client, package, admin_headers):
    url = f"/api/v1/tour-packages/{package['id']}/variants"
    client.post(url, headers=admin_headers, json={"name": "Budget", "is_default": True})
    variants = {v['name']: v['is_default'] for v in client.get(url, headers=admin_headers).json()}
    assert variants == {"Premium": False, "Budget": True}


def test_variant_mapping_must_use_package_itinerary(client, masters, package, admin_headers):
    foreign = client.post(f"/api/v1/tour-packages/{package['id']}/variants", headers=admin_headers, json={
        "name": "Broken", "hotel_mappings": [{"itinerary_id": 999, "hotel_id": masters['hotel'].id}],
    })
    assert foreign.status_code == 400
    assert foreign.json()['detail'] == "Itinerary 999 does not belong to this package"


def test_duplicate_copies_variants_and_pricing(client, package, admin_headers):
    response = client.post(f"/api/v1/tour-packages/{package['id']}/duplicate", headers=admin_headers)
    assert response.status_code == 200
    copy = response.json()

    assert copy['id'] != package['id']
    assert copy['tour_package_name'] == "Copy of Goa Classic"
    assert len(copy['itineraries']) == 2
    new_itinerary_ids = {i['id'] for i in copy['itineraries']}
    mapping = copy['variants'][0]['hotel_mappings'][0]
    assert mapping['itinerary_id'] in new_itinerary_ids
    assert mapping['hotel_name'] == "Palm Grove"
    assert copy['pricings'][0]['package_variant_id'] == copy['variants'][0]['id']
    assert [c['price'] for c in copy['pricings'][0]['components']] == [5000.0, 1500.0]


def test_query_from_package_copies_content_and_snapshots_variants(client, masters, package, admin_headers):
    variant_id = package['variants'][0]['id']
    response = client.post(f"/api/v1/tour-package-queries/from-tour-package/{package['id']}",
                           headers=admin_headers, json={
                               "customer_name": "Asha Rao",
                               "customer_id": masters['customer'].id,
                               "tour_starts_from": "2024-03-10",
                               "tour_ends_on": "2024-03-12",
                               "selected_variant_ids": [variant_id],
                           })
    assert response.status_code == 200
    query = response.json()

    assert query['tour_package_query_number'] == "TPQ-00001"
    assert query['tour_package_query_name'] == "Goa Classic"
    assert query['tour_package_id'] == package['id']
    assert query['inclusions'] == ["Breakfast", "Airport transfers"]
    assert len(query['itineraries']) == 2
    assert {i['id'] for i in query['itineraries']}.isdisjoint({i['id'] for i in package['itineraries']})

    snapshot = query['variant_snapshots'][0]
    assert snapshot['name'] == "Premium"
    assert snapshot['source_variant_id'] == variant_id
    assert snapshot['hotel_snapshots'][0]['hotel_name'] == "Palm Grove"
    assert snapshot['hotel_snapshots'][0]['location_label'] == "Goa"
    assert snapshot['pricing_snapshots'][0]['total_price'] == 6500.0
    assert [c['attribute_name'] for c in snapshot['pricing_snapshots'][0]['components']] == [
        "Per Person Double Sharing", "Extra Bed"
    ]


def test_snapshots_survive_package_edits_and_can_be_overwritten(client, masters, package, tour_query, admin_headers):
    variant_id = package['variants'][0]['id']
    url = f"/api/v1/tour-package-queries/{tour_query.id}/variant-snapshots"
    first = client.post(url, headers=admin_headers, json={"variant_ids": [variant_id]})
    assert first.status_code == 200
    assert first.json()['created'] == 1

    client.patch(f"/api/v1/tour-packages/{package['id']}/variants/{variant_id}", headers=admin_headers,
                 json={"name": "Premium Plus"})
    frozen = client.get(url, headers=admin_headers).json()
    assert frozen[0]['name'] == "Premium"

    kept = client.post(url, headers=admin_headers, json={"variant_ids": [variant_id], "overwrite": False})
    assert kept.json()['created'] == 0

    replaced = client.post(url, headers=admin_headers, json={"variant_ids": [variant_id]})
    assert replaced.json()['created'] == 1
    assert [s['name'] for s in replaced.json()['variant_snapshots']] == ["Premium Plus"]

    missing = client.post(url, headers=admin_headers, json={"variant_ids": [999]})
    assert missing.status_code == 400

    removed = client.delete(url, headers=admin_headers).json()
    assert removed['deleted'] == 1


def test_deleting_package_unlinks_queries(client, db, masters, package, admin_headers):
    query_id = client.post(f"/api/v1/tour-package-queries/from-tour-package/{package['id']}",
                           headers=admin_headers, json={"customer_name": "Asha Rao"}).json()['id']
    response = client.delete(f"/api/v1/tour-packages/{package['id']}", headers=admin_headers)
    assert response.status_code == 200

    db.expire_all()
    query = db.get(TourPackageQuery, query_id)
    assert query.tour_package_id is None
    assert len(query.itineraries) == 2


def test_query_numbers_are_sequential_and_unique(client, masters, tour_query, admin_headers):
    assert client.get("/api/v1/tour-package-queries/next-number",
                      headers=admin_headers).json() == {"tour_package_query_number": "TPQ-00002"}

    created = client.post("/api/v1/tour-package-queries", headers=admin_headers, json={
        "location_id": masters['location'].id, "customer_name": "Vikram",
    })
    assert created.json()["tour_package_query_number"] == "TPQ-00002"

    duplicate = client.post("/api/v1/tour-package-queries", headers=admin_headers, json={
        "location_id": masters['location'].id, "tour_package_query_number": "TPQ-0001",
    })
    assert duplicate.status_code == 400

    inverted = client.post("/api/v1/tour-package-queries", headers=admin_headers, json={
        "location_id": masters['location'].id,
        "tour_starts_from": "2024-03-10", "tour_ends_on": "2024-03-01",
    })
    assert inverted.status_code == 400


def test_numbering_skips_hand_entered_numbers(client, masters, tour_query, admin_headers):
    def create(**extra):
        response = client.post("/api/v1/tour-package-queries", headers=admin_headers, json={
            "location_id": masters['location'].id, **extra,
        })
        assert response.status_code == 200, response.text
        return response.json()["tour_package_query_number"]

    assert create() == "TPQ-00002"
    assert create(tour_package_query_number="TPQ-WEB1") == "TPQ-WEB1"
    assert create() == "TPQ-00003"

    create(tour_package_query_number="TPQ-100000")
    assert create() == "TPQ-100001"


def test_associate_can_create_but_not_edit_queries(client, masters, tour_query, associate_headers):
    created = client.post("/api/v1/tour-package-queries", headers=associate_headers, json={
        "location_id": masters['location'].id,
    })
    assert created.status_code == 200
    edit = client.patch(f"/api/v1/tour-package-queries/{tour_query.id}", headers=associate_headers,
                        json={"remarks": "VIP"})
    assert edit.status_code == 403


def accounting_payload(masters):
    return {
        "sale_details": [{"customer_id": masters['customer'].id, "sale_date": "2024-03-01",
                          "sale_price": "10000", "gst_amount": "500"}],
        "purchase_details": [{"supplier_id": masters['supplier'].id, "purchase_date": "2024-03-02",
                              "price": "6000", "gst_amount": "300"}],
        "receipt_details": [{"customer_id": masters['customer'].id, "receipt_date": "2024-03-03",
                             "amount": "6000", "bank_account_id": masters['bank'].id}],
        "expense_details": [{"expense_date": "2024-03-04", "amount": "200",
                             "cash_account_id": masters['cash'].id}],
    }


def test_accounting_replacement_reposts_balances(client, db, masters, tour_query, admin_headers):
    url = f"/api/v1/tour-package-queries/{tour_query.id}/accounting"
    response = client.patch(url, headers=admin_headers, json=accounting_payload(masters))
    assert response.status_code == 200
    accounts = response.json()

    summary = accounts['summary']
    assert summary['sales_incl_gst'] == 10500.0
    assert summary['purchases_incl_gst'] == 6300.0
    assert summary['net_profit'] == 4000.0
    assert summary['receipt_percentage'] == 57.0
    assert summary['receipt_status'] == "partial"
    assert summary['outstanding_receivable'] == 4500.0
    assert accounts['receipt_details'][0]['tour_package_query_id'] == tour_query.id

    db.refresh(masters['bank'])
    db.refresh(masters['cash'])
    assert masters['bank'].current_balance == Decimal("7000")
    assert masters['cash'].current_balance == Decimal("0")

    second = client.patch(url, headers=admin_headers, json={"receipt_details": []}).json()
    assert second['receipt_details'] == []
    assert len(second['sale_details']) == 1
    db.refresh(masters['bank'])
    assert masters['bank'].current_balance == Decimal("1000")

    entries = db.query(AuditLog).filter(AuditLog.action == "ACCOUNTING_REPLACED").all()
    assert len(entries) == 2


def test_failed_accounting_replacement_changes_nothing(client, db, masters, tour_query, admin_headers):
    url = f"/api/v1/tour-package-queries/{tour_query.id}/accounting"
    client.patch(url, headers=admin_headers, json=accounting_payload(masters))

    bad = client.patch(url, headers=admin_headers, json={
        "receipt_details": [{"receipt_date": "2024-03-05", "amount": "10"}],
    })
    assert bad.status_code == 400

    accounts = client.get(f"/api/v1/tour-package-queries/{tour_query.id}/accounts", headers=admin_headers).json()
    assert len(accounts['receipt_details']) == 1
    db.refresh(masters['bank'])
    assert masters['bank'].current_balance == Decimal("7000")


def test_query_with_financial_records_cannot_be_deleted(client, masters, tour_query, admin_headers):
    client.post("/api/v1/sales", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "sale_date": "2024-03-01", "sale_price": "100",
    })
    response = client.delete(f"/api/v1/tour-package-queries/{tour_query.id}", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()['detail'] == "Cannot delete a tour package query that has financial records"


def test_sale_returns_count_against_their_query(client, masters, tour_query, admin_headers):
    sale = client.post("/api/v1/sales", headers=admin_headers, json={
        "tour_package_query_id": tour_query.id, "sale_date": "2024-03-01", "sale_price": "1000",
    }).json()
    client.post("/api/v1/sale-returns", headers=admin_headers, json={
        "sale_detail_id": sale['id'], "return_date": "2024-03-05", "amount": "250",
    })
    accounts = client.get(f"/api/v1/tour-package-queries/{tour_query.id}/accounts", headers=admin_headers).json()
    assert len(accounts['sale_returns']) == 1
    assert accounts['summary']['net_sales'] == 750.0
