from datetime import date
from decimal import Decimal

import pytest

from tourdesk.models import (
    HotelPricing, TransportPricing, TourPackage, TourPackagePricing, PricingComponent,
    PackageVariant, VariantHotelMapping, Itinerary
)


@pytest.fixture
def rates(db, masters):
    """Deluxe double CP rooms at both hotels and a daily Innova in Goa"""
    window = dict(start_date=date(2024, 1, 1), end_date=date(2024, 12, 31))
    room = dict(room_type_id=masters['room_type'].id, occupancy_type_id=masters['occupancy'].id,
                meal_plan_id=masters['meal_plan'].id)
    db.add_all([
        HotelPricing(hotel_id=masters['hotel'].id, price=Decimal("3000"), **room, **window),
        HotelPricing(hotel_id=masters['other_hotel'].id, price=Decimal("4500"), **room, **window),
        TransportPricing(location_id=masters['location'].id, vehicle_type_id=masters['vehicle'].id,
                         price=Decimal("2000"), **window),
    ])
    db.commit()
    return room


def day(masters, rates, day_number, rooms, hotel=None, **extra):
    return {
        "location_id": masters['location'].id,
        "day_number": day_number,
        "hotel_id": (hotel or masters['hotel']).id,
        "room_allocations": [{**rates, "quantity": rooms}],
        "transport_details": [{"vehicle_type_id": masters['vehicle'].id, "quantity": 1}],
        **extra,
    }


def test_calculate_sums_rooms_transport_and_markup(client, masters, rates, admin_headers):
    response = client.post("/api/v1/pricing/calculate", headers=admin_headers, json={
        "tour_starts_from": "2024-03-10",
        "tour_ends_on": "2024-03-12",
        "markup": "2.5",
        "itineraries": [day(masters, rates, 1, 2), day(masters, rates, 2, 1)],
    })
    assert response.status_code == 200
    result = response.json()
    assert result["breakdown"] == {"accommodation": 9000.0, "transport": 4000.0}
    assert result["base_cost"] == 13000.0
    assert result["applied_markup"] == {"percentage": 2.5, "amount": 325.0}
    assert result["total_cost"] == 13325.0

    first = result["itinerary_breakdown"][0]
    assert first["hotel_name"] == "Sea Breeze"
    assert first["room_breakdown"][0]["price_per_night"] == 3000.0
    assert first["room_breakdown"][0]["pricing_found"] is True
    assert len(result["transport_details"]) == 2


def test_calculate_rounds_total_to_whole_number(client, masters, rates, admin_headers):
    response = client.post("/api/v1/pricing/calculate", headers=admin_headers, json={
        "tour_starts_from": "2024-03-10",
        "tour_ends_on": "2024-03-11",
        "markup": "0.05",
        "itineraries": [day(masters, rates, 1, 1, transport_details=[])],
    })
    result = response.json()
    assert result["applied_markup"]["amount"] == 1.5
    assert result["total_cost"] == 3002.0


def test_missing_rate_prices_at_zero(client, masters, rates, admin_headers):
    response = client.post("/api/v1/pricing/calculate", headers=admin_headers, json={
        "tour_starts_from": "2025-03-10",
        "tour_ends_on": "2025-03-11",
        "itineraries": [day(masters, rates, 1, 1)],
    })
    result = response.json()
    assert result["total_cost"] == 0.0
    assert result["itinerary_breakdown"][0]["room_breakdown"][0]["pricing_found"] is False
    assert result["transport_details"][0]["pricing_found"] is False


@pytest.mark.parametrize("payload, message", [
    ({"itineraries": []}, "Tour start and end dates are required"),
    ({"tour_starts_from": "2024-03-10", "tour_ends_on": "2024-03-09", "itineraries": []},
     "Tour end date must be on or after the start date"),
    ({"tour_starts_from": "2024-03-10", "tour_ends_on": "2024-03-11", "itineraries": []},
     "At least one itinerary is required"),
])
def test_calculate_rejects_incomplete_requests(client, admin_headers, payload, message):
    response = client.post("/api/v1/pricing/calculate", headers=admin_headers, json=payload)
    assert response.status_code == 400
    assert response.json()["detail"] == message


def test_variant_uses_its_hotel_for_the_mapped_day(client, db, masters, rates, admin_headers):
    package = TourPackage(tour_package_name="Goa Classic", location_id=masters['location'].id)
    db.add(package)
    db.flush()
    itinerary = Itinerary(tour_package_id=package.id, day_number=1, location_id=masters['location'].id,
                          hotel_id=masters['hotel'].id)
    variant = PackageVariant(tour_package_id=package.id, name="Premium")
    db.add_all([itinerary, variant])
    db.flush()
    db.add(VariantHotelMapping(package_variant_id=variant.id, itinerary_id=itinerary.id,
                               hotel_id=masters['other_hotel'].id))
    db.commit()

    response = client.post("/api/v1/pricing/calculate-variant", headers=admin_headers, json={
        "tour_starts_from": "2024-03-10",
        "tour_ends_on": "2024-03-11",
        "variant_ids": [variant.id],
        "itineraries": [{"id": itinerary.id, "location_id": masters['location'].id,
                         "day_number": 1, "hotel_id": masters['hotel'].id}],
        "variant_room_allocations": {str(variant.id): {str(itinerary.id): [{**rates, "quantity": 2}]}},
        "variant_transport_details": {str(variant.id): {"day-1": [{"vehicle_type_id": masters['vehicle'].id}]}},
    })
    assert response.status_code == 200
    result = response.json()["variants"][0]
    assert result["variant_name"] == "Premium"
    assert result["itinerary_breakdown"][0]["hotel_name"] == "Palm Grove"
    assert result["breakdown"] == {"accommodation": 9000.0, "transport": 2000.0}
    assert result["total_cost"] == 11000.0


def test_variant_pricing_rejects_foreign_and_unknown_variants(client, db, masters, admin_headers):
    goa, kerala = (TourPackage(tour_package_name=name, location_id=masters['location'].id)
                   for name in ("Goa Classic", "Kerala Backwaters"))
    db.add_all([goa, kerala])
    db.flush()
    foreign = PackageVariant(tour_package_id=kerala.id, name="Houseboat")
    db.add(foreign)
    db.commit()

    def calculate(**extra):
        return client.post("/api/v1/pricing/calculate-variant", headers=admin_headers, json={
            "tour_starts_from": "2024-03-10",
            "tour_ends_on": "2024-03-11",
            "itineraries": [{"location_id": masters['location'].id, "day_number": 1}],
            **extra,
        })

    response = calculate(tour_package_id=goa.id, variant_ids=[foreign.id])
    assert response.status_code == 400
    assert "does not belong" in response.json()["detail"]

    response = calculate(variant_ids=[99999])
    assert response.status_code == 400
    assert response.json()["detail"] == "Package variant 99999 not found"

    assert calculate(tour_package_id=kerala.id, variant_ids=[foreign.id]).status_code == 200


@pytest.fixture
def priced_package(db, masters):
    package = TourPackage(tour_package_name="Goa Classic", location_id=masters['location'].id)
    db.add(package)
    db.flush()
    pricing = TourPackagePricing(
        tour_package_id=package.id, start_date=date(2024, 1, 1), end_date=date(2024, 6, 30),
        meal_plan_id=masters['meal_plan'].id, number_of_rooms=2
    )
    pricing.components = [
        PricingComponent(pricing_attribute_id=masters['double_attribute'].id, price=Decimal("5000")),
        PricingComponent(pricing_attribute_id=masters['extra_bed'].id, price=Decimal("1500")),
    ]
    db.add(pricing)
    db.commit()
    return package


def test_package_price_multiplies_occupancy_and_rooms(client, masters, priced_package, admin_headers):
    response = client.post("/api/v1/pricing/package-price", headers=admin_headers, json={
        "tour_package_id": priced_package.id,
        "journey_date": "2024-04-15",
        "meal_plan_id": masters['meal_plan'].id,
        "room_allocations": [{"quantity": 1}, {"quantity": 1}],
    })
    assert response.status_code == 200
    result = response.json()
    assert result["number_of_rooms"] == 2
    assert result["total_price"] == 23000.0
    double, extra_bed = result["components"]
    assert double["occupancy_multiplier"] == 2
    assert double["total_price"] == 20000.0
    assert extra_bed["occupancy_multiplier"] == 1
    assert extra_bed["total_price"] == 3000.0


def test_package_price_needs_exactly_one_match(client, db, masters, priced_package, admin_headers):
    payload = {
        "tour_package_id": priced_package.id,
        "journey_date": "2024-08-15",
        "meal_plan_id": masters['meal_plan'].id,
        "room_allocations": [{"quantity": 2}],
    }
    none = client.post("/api/v1/pricing/package-price", headers=admin_headers, json=payload)
    assert none.status_code == 400
    assert none.json()["detail"].startswith("No matching pricing found for 2024-08-15")

    db.add(TourPackagePricing(
        tour_package_id=priced_package.id, start_date=date(2024, 3, 1), end_date=date(2024, 9, 30),
        meal_plan_id=masters['meal_plan'].id, number_of_rooms=2
    ))
    db.commit()
    payload["journey_date"] = "2024-04-15"
    multiple = client.post("/api/v1/pricing/package-price", headers=admin_headers, json=payload)
    assert multiple.status_code == 400
    assert multiple.json()["detail"].startswith("Multiple pricing periods match")


def test_package_price_for_unknown_package(client, masters, admin_headers):
    response = client.post("/api/v1/pricing/package-price", headers=admin_headers, json={
        "tour_package_id": 999, "journey_date": "2024-04-15",
        "meal_plan_id": masters['meal_plan'].id, "room_allocations": [{"quantity": 1}],
    })
    assert response.status_code == 404


def test_line_items_take_rate_from_tax_slab(client, masters, admin_headers):
    response = client.post("/api/v1/pricing/line-items", headers=admin_headers, json={
        "items": [
            {"product_name": "Hotel", "quantity": "2", "price_per_unit": "1000", "tax_slab_id": masters['gst'].id},
            {"product_name": "Cab", "quantity": "1", "total_amount": "1050", "tax_percentage": "5"},
        ],
        "changed_total_index": 1,
    })
    assert response.status_code == 200
    result = response.json()
    assert result["items"][0]["tax_amount"] == 100.0
    assert result["items"][1]["price_per_unit"] == 1000.0
    assert result["grand_total"] == 3150.0

    out_of_range = client.post("/api/v1/pricing/line-items", headers=admin_headers, json={
        "items": [], "changed_total_index": 0,
    })
    assert out_of_range.status_code == 400
