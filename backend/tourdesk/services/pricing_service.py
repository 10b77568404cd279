"""
Pricing Service - tour cost calculators and transaction line item maths
"""
from typing import Optional, List, Dict, Tuple
from sqlalchemy.orm import Session, selectinload, joinedload
from decimal import Decimal
from datetime import date, datetime
import logging

from tourdesk.models import (
    HotelPricing, TransportPricing, Hotel, RoomType, OccupancyType, MealPlan,
    VehicleType, TourPackage, TourPackagePricing, PricingComponent, PackageVariant,
    VariantHotelMapping, TaxSlab
)
from tourdesk.schemas import (
    PricingCalculateRequest, VariantPricingCalculateRequest, PackagePriceRequest,
    LineItemsRequest, PricingItineraryInput
)
from tourdesk.core.config import settings
from tourdesk.services.calculations import (
    calculate_line_items, occupancy_multiplier, round_whole
)
from tourdesk.services.common import round2, to_decimal

logger = logging.getLogger(__name__)

ZERO = Decimal("0")


def _name(record) -> Optional[str]:
    return record.name if record is not None else None


class PricingService:
    def __init__(self, db: Session):
        self.db = db

    # ==================== RATE LOOKUPS ====================

    def find_hotel_rate(self, hotel_id: int, room_type_id: int, occupancy_type_id: int,
                        meal_plan_id: Optional[int], tour_start: date, tour_end: date) -> Optional[HotelPricing]:
        """Active hotel rate overlapping the tour window, latest start first"""
        return self.db.query(HotelPricing).filter(
            HotelPricing.hotel_id == hotel_id,
            HotelPricing.room_type_id == room_type_id,
            HotelPricing.occupancy_type_id == occupancy_type_id,
            HotelPricing.meal_plan_id == meal_plan_id,
            HotelPricing.is_active == True,
            HotelPricing.start_date <= tour_end,
            HotelPricing.end_date >= tour_start
        ).order_by(HotelPricing.start_date.desc()).first()

    def find_transport_rate(self, location_id: int, vehicle_type_id: int,
                            tour_start: date, tour_end: date) -> Optional[TransportPricing]:
        return self.db.query(TransportPricing).filter(
            TransportPricing.location_id == location_id,
            TransportPricing.vehicle_type_id == vehicle_type_id,
            TransportPricing.is_active == True,
            TransportPricing.start_date <= tour_end,
            TransportPricing.end_date >= tour_start
        ).order_by(TransportPricing.start_date.desc()).first()

    # ==================== TOUR COST ====================

    def _price_day(self, itinerary: PricingItineraryInput, hotel_id: Optional[int],
                   allocations, transports, tour_start: date, tour_end: date) -> Tuple[dict, List[dict]]:
        hotel = self.db.get(Hotel, hotel_id) if hotel_id else None
        room_breakdown = []
        accommodation = ZERO

        for allocation in allocations:
            quantity = allocation.quantity or 0
            if quantity <= 0 or not hotel_id or not allocation.room_type_id or not allocation.occupancy_type_id:
                continue
            rate = self.find_hotel_rate(
                hotel_id, allocation.room_type_id, allocation.occupancy_type_id,
                allocation.meal_plan_id, tour_start, tour_end
            )
            price = to_decimal(rate.price) if rate else ZERO
            cost = price * quantity
            accommodation += cost
            room_breakdown.append({
                'room_type_id': allocation.room_type_id,
                'room_type_name': _name(self.db.get(RoomType, allocation.room_type_id)),
                'occupancy_type_id': allocation.occupancy_type_id,
                'occupancy_type_name': _name(self.db.get(OccupancyType, allocation.occupancy_type_id)),
                'meal_plan_id': allocation.meal_plan_id,
                'meal_plan_name': _name(self.db.get(MealPlan, allocation.meal_plan_id)) if allocation.meal_plan_id else None,
                'quantity': quantity,
                'price_per_night': float(price),
                'total_cost': float(cost),
                'pricing_found': rate is not None,
            })
            if rate is None:
                logger.warning(
                    f"No hotel rate for hotel={hotel_id} room_type={allocation.room_type_id} "
                    f"occupancy={allocation.occupancy_type_id} meal_plan={allocation.meal_plan_id}"
                )

        transport_rows = []
        transport_total = ZERO
        for transport in transports:
            if not transport.vehicle_type_id:
                continue
            quantity = transport.quantity if transport.quantity else 1
            rate = self.find_transport_rate(itinerary.location_id, transport.vehicle_type_id, tour_start, tour_end)
            price = to_decimal(rate.price) if rate else ZERO
            cost = price * quantity
            transport_total += cost
            transport_rows.append({
                'day_number': itinerary.day_number,
                'vehicle_type_id': transport.vehicle_type_id,
                'vehicle_type_name': _name(self.db.get(VehicleType, transport.vehicle_type_id)),
                'transport_type': rate.transport_type if rate else None,
                'quantity': quantity,
                'price_per_unit': float(price),
                'total_cost': float(cost),
                'description': transport.description,
                'pricing_found': rate is not None,
            })

        day = {
            'itinerary_id': itinerary.id,
            'day_number': itinerary.day_number,
            'hotel_id': hotel_id,
            'hotel_name': hotel.name if hotel else None,
            'accommodation_cost': float(accommodation),
            'transport_cost': float(transport_total),
            'total_cost': float(accommodation + transport_total),
            'room_breakdown': room_breakdown,
        }
        return day, transport_rows

    def _check_request(self, data: PricingCalculateRequest):
        if not data.tour_starts_from or not data.tour_ends_on:
            raise ValueError("Tour start and end dates are required")
        if data.tour_ends_on < data.tour_starts_from:
            raise ValueError("Tour end date must be on or after the start date")
        if not data.itineraries:
            raise ValueError("At least one itinerary is required")

    def _total(self, days: List[dict], transports: List[dict], markup: Decimal) -> dict:
        accommodation = sum((to_decimal(day['accommodation_cost']) for day in days), ZERO)
        transport = sum((to_decimal(day['transport_cost']) for day in days), ZERO)
        base = accommodation + transport
        markup_amount = base * to_decimal(markup) / 100
        return {
            'total_cost': float(round_whole(base + markup_amount)),
            'base_cost': float(round2(base)),
            'applied_markup': {
                'percentage': float(markup),
                'amount': float(round2(markup_amount)),
            },
            'breakdown': {
                'accommodation': float(round2(accommodation)),
                'transport': float(round2(transport)),
            },
            'itinerary_breakdown': days,
            'transport_details': transports,
            'calculated_at': datetime.utcnow().isoformat(),
        }

    def calculate(self, data: PricingCalculateRequest) -> dict:
        """Tour cost from hotel and transport rate cards, plus markup"""
        self._check_request(data)
        days, transports = [], []
        for itinerary in data.itineraries:
            day, rows = self._price_day(
                itinerary, itinerary.hotel_id, itinerary.room_allocations,
                itinerary.transport_details, data.tour_starts_from, data.tour_ends_on
            )
            days.append(day)
            transports.extend(rows)
        return self._total(days, transports, data.markup)

    def _variant_hotels(self, variant: Optional[PackageVariant]) -> Dict[int, int]:
        """day number -> hotel id from a variant's hotel mappings"""
        if variant is None:
            return {}
        return {
            mapping.itinerary.day_number: mapping.hotel_id
            for mapping in variant.hotel_mappings
            if mapping.itinerary is not None and mapping.itinerary.day_number is not None
        }

    @staticmethod
    def _variant_entries(mapping: Dict[str, Dict[str, list]], variant_id: int,
                         itinerary: PricingItineraryInput):
        """Entries for an itinerary keyed by its id or by 'day-<n>'"""
        per_variant = mapping.get(str(variant_id)) or {}
        if itinerary.id is not None and str(itinerary.id) in per_variant:
            return per_variant[str(itinerary.id)]
        return per_variant.get(f"day-{itinerary.day_number}", [])

    def calculate_variant(self, data: VariantPricingCalculateRequest) -> dict:
        """One tour cost per variant, using each variant's rooms, transport and hotels"""
        self._check_request(data)
        variant_ids = data.variant_ids or [int(key) for key in data.variant_room_allocations.keys()]
        if not variant_ids:
            raise ValueError("At least one variant is required")

        results = []
        for variant_id in variant_ids:
            variant = self.db.query(PackageVariant).options(
                selectinload(PackageVariant.hotel_mappings).joinedload(VariantHotelMapping.itinerary)
            ).filter(PackageVariant.id == variant_id).first()
            if not variant:
                raise ValueError(f"Package variant {variant_id} not found")
            if data.tour_package_id is not None and variant.tour_package_id != data.tour_package_id:
                raise ValueError(f"Package variant {variant_id} does not belong to tour package {data.tour_package_id}")
            hotels_by_day = self._variant_hotels(variant)

            days, transports = [], []
            for itinerary in data.itineraries:
                hotel_id = hotels_by_day.get(itinerary.day_number) or itinerary.hotel_id
                day, rows = self._price_day(
                    itinerary, hotel_id,
                    self._variant_entries(data.variant_room_allocations, variant_id, itinerary),
                    self._variant_entries(data.variant_transport_details, variant_id, itinerary),
                    data.tour_starts_from, data.tour_ends_on
                )
                days.append(day)
                transports.extend(rows)

            result = self._total(days, transports, data.markup)
            result['variant_id'] = variant_id
            result['variant_name'] = variant.name
            results.append(result)

        return {'variants': results, 'calculated_at': datetime.utcnow().isoformat()}

    # ==================== PACKAGE PRICE ====================

    def package_price(self, data: PackagePriceRequest) -> Optional[dict]:
        """
        Price a package from its pricing periods. Exactly one active period
        must match the journey date, meal plan and room count.
        """
        package = self.db.query(TourPackage).filter(TourPackage.id == data.tour_package_id).first()
        if not package:
            return None
        if not data.room_allocations:
            raise ValueError("At least one room allocation is required")

        total_rooms = sum((allocation.quantity or 1) for allocation in data.room_allocations)

        query = self.db.query(TourPackagePricing).options(
            selectinload(TourPackagePricing.components).joinedload(PricingComponent.pricing_attribute),
            joinedload(TourPackagePricing.meal_plan)
        ).filter(
            TourPackagePricing.tour_package_id == package.id,
            TourPackagePricing.is_active == True,
            TourPackagePricing.start_date <= data.journey_date,
            TourPackagePricing.end_date >= data.journey_date,
            TourPackagePricing.meal_plan_id == data.meal_plan_id,
            TourPackagePricing.number_of_rooms == total_rooms
        )
        if data.package_variant_id:
            query = query.filter(TourPackagePricing.package_variant_id == data.package_variant_id)
        matches = query.all()

        if not matches:
            raise ValueError(
                f"No matching pricing found for {data.journey_date.isoformat()}, "
                f"{total_rooms} room(s) and the selected meal plan"
            )
        if len(matches) > 1:
            raise ValueError("Multiple pricing periods match the criteria; refine the package pricing definitions")

        pricing = matches[0]
        symbol = settings.CURRENCY_SYMBOL
        rooms_label = "room" if total_rooms == 1 else "rooms"
        components = []
        total = ZERO
        for component in pricing.components:
            name = component.pricing_attribute.name if component.pricing_attribute else "Pricing Component"
            base_price = to_decimal(component.price)
            multiplier = occupancy_multiplier(name)
            component_total = base_price * multiplier * total_rooms
            total += component_total
            components.append({
                'pricing_attribute_id': component.pricing_attribute_id,
                'name': name,
                'base_price': float(base_price),
                'purchase_price': float(component.purchase_price) if component.purchase_price is not None else None,
                'occupancy_multiplier': multiplier,
                'rooms': total_rooms,
                'total_price': float(round2(component_total)),
                'description': (
                    f"{symbol}{base_price:.2f} × {multiplier} occupancy × {total_rooms} {rooms_label} "
                    f"= {symbol}{component_total:.2f}"
                ),
            })
        if not components:
            components.append({
                'pricing_attribute_id': None,
                'name': "Tour Package Price",
                'base_price': 0.0,
                'purchase_price': None,
                'occupancy_multiplier': 1,
                'rooms': total_rooms,
                'total_price': 0.0,
                'description': f"No pricing components configured for {total_rooms} {rooms_label}",
            })

        return {
            'tour_package_id': package.id,
            'tour_package_pricing_id': pricing.id,
            'package_variant_id': pricing.package_variant_id,
            'meal_plan_name': pricing.meal_plan.name if pricing.meal_plan else None,
            'start_date': pricing.start_date.isoformat(),
            'end_date': pricing.end_date.isoformat(),
            'number_of_rooms': total_rooms,
            'total_price': float(round2(total)),
            'components': components,
        }

    # ==================== LINE ITEMS ====================

    def line_items(self, data: LineItemsRequest) -> dict:
        """Recalculate transaction lines; tax rates come from the tax slab when not given"""
        items = []
        for item in data.items:
            rate = item.tax_percentage
            if rate is None and item.tax_slab_id:
                slab = self.db.get(TaxSlab, item.tax_slab_id)
                if slab is None:
                    raise ValueError(f"Tax slab {item.tax_slab_id} not found")
                rate = slab.percentage
            values = item.model_dump()
            values['tax_percentage'] = rate
            items.append(values)

        if data.changed_total_index is not None and not 0 <= data.changed_total_index < len(items):
            raise ValueError("changed_total_index is out of range")

        result = calculate_line_items(items, data.changed_total_index)
        return {
            'items': [
                {key: float(value) if isinstance(value, Decimal) else value for key, value in line.items()}
                for line in result['items']
            ],
            'subtotal': float(result['subtotal']),
            'total_tax': float(result['total_tax']),
            'grand_total': float(result['grand_total']),
        }
