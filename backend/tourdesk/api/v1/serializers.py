"""
Response builders shared by the routers
"""
from datetime import date, datetime
from decimal import Decimal
from io import BytesIO

from fastapi.responses import StreamingResponse


def plain(value):
    """JSON friendly scalar: Decimal as float, dates as ISO strings"""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return value


def columns_dict(record, exclude=()) -> dict:
    """Every mapped column of a row"""
    return {
        column.key: plain(getattr(record, column.key))
        for column in record.__table__.columns
        if column.key not in exclude
    }


def amounts(values: dict) -> dict:
    return {key: plain(value) for key, value in values.items()}


def image_dict(image) -> dict:
    return {'id': image.id, 'url': image.url}


def name_of(record, attribute: str = 'name'):
    return getattr(record, attribute) if record is not None else None


# ==================== PLACES ====================

def location_dict(location) -> dict:
    data = columns_dict(location)
    data['images'] = [image_dict(i) for i in location.images]
    return data


def hotel_dict(hotel) -> dict:
    data = columns_dict(hotel)
    data['location_label'] = name_of(hotel.location, 'label')
    data['images'] = [image_dict(i) for i in hotel.images]
    return data


def hotel_pricing_dict(pricing) -> dict:
    data = columns_dict(pricing)
    data['room_type_name'] = name_of(pricing.room_type)
    data['occupancy_type_name'] = name_of(pricing.occupancy_type)
    data['meal_plan_name'] = name_of(pricing.meal_plan)
    return data


def transport_pricing_dict(pricing) -> dict:
    data = columns_dict(pricing)
    data['location_label'] = name_of(pricing.location, 'label')
    data['vehicle_type_name'] = name_of(pricing.vehicle_type)
    return data


# ==================== PACKAGES ====================

def itinerary_dict(itinerary) -> dict:
    data = columns_dict(itinerary)
    data['location_label'] = name_of(itinerary.location, 'label')
    data['hotel_name'] = name_of(itinerary.hotel)
    data['images'] = [image_dict(i) for i in itinerary.images]
    data['activities'] = [
        {**columns_dict(a), 'images': [image_dict(i) for i in a.images]}
        for a in itinerary.activities
    ]
    data['room_allocations'] = [
        {
            **columns_dict(r),
            'room_type_name': name_of(r.room_type),
            'occupancy_type_name': name_of(r.occupancy_type),
            'meal_plan_name': name_of(r.meal_plan),
        }
        for r in itinerary.room_allocations
    ]
    data['transport_details'] = [
        {**columns_dict(t), 'vehicle_type_name': name_of(t.vehicle_type)}
        for t in itinerary.transport_details
    ]
    return data


def flight_dict(flight) -> dict:
    return columns_dict(flight)


def package_pricing_dict(pricing) -> dict:
    data = columns_dict(pricing)
    data['meal_plan_name'] = name_of(pricing.meal_plan)
    data['vehicle_type_name'] = name_of(pricing.vehicle_type)
    data['variant_name'] = name_of(pricing.package_variant)
    data['components'] = [
        {**columns_dict(c), 'pricing_attribute_name': name_of(c.pricing_attribute)}
        for c in pricing.components
    ]
    return data


def variant_dict(variant) -> dict:
    data = columns_dict(variant)
    data['hotel_mappings'] = [
        {
            'id': m.id,
            'itinerary_id': m.itinerary_id,
            'day_number': m.itinerary.day_number if m.itinerary else None,
            'hotel_id': m.hotel_id,
            'hotel_name': name_of(m.hotel),
        }
        for m in sorted(
            variant.hotel_mappings,
            key=lambda m: (m.itinerary.day_number or 0) if m.itinerary else 0
        )
    ]
    return data


def tour_package_summary(package) -> dict:
    return {
        'id': package.id,
        'tour_package_name': package.tour_package_name,
        'tour_package_type': package.tour_package_type,
        'tour_category': package.tour_category,
        'location_id': package.location_id,
        'location_label': name_of(package.location, 'label'),
        'num_days_night': package.num_days_night,
        'price': package.price,
        'total_price': package.total_price,
        'slug': package.slug,
        'is_featured': package.is_featured,
        'is_archived': package.is_archived,
        'images': [image_dict(i) for i in package.images],
        'updated_at': plain(package.updated_at),
    }


def tour_package_dict(package) -> dict:
    data = columns_dict(package)
    data['location_label'] = name_of(package.location, 'label')
    data['images'] = [image_dict(i) for i in package.images]
    data['itineraries'] = [itinerary_dict(i) for i in package.itineraries]
    data['flight_details'] = [flight_dict(f) for f in package.flight_details]
    data['variants'] = [variant_dict(v) for v in package.variants]
    data['pricings'] = [package_pricing_dict(p) for p in package.pricings]
    return data


# ==================== QUERIES ====================

def snapshot_dict(snapshot) -> dict:
    data = columns_dict(snapshot)
    data['hotel_snapshots'] = [columns_dict(h) for h in snapshot.hotel_snapshots]
    data['pricing_snapshots'] = [
        {**columns_dict(p), 'components': [columns_dict(c) for c in p.component_snapshots]}
        for p in snapshot.pricing_snapshots
    ]
    return data


def query_summary(query) -> dict:
    return {
        'id': query.id,
        'tour_package_query_number': query.tour_package_query_number,
        'tour_package_query_name': query.tour_package_query_name,
        'tour_package_query_type': query.tour_package_query_type,
        'customer_id': query.customer_id,
        'customer_name': query.customer_name,
        'customer_number': query.customer_number,
        'location_id': query.location_id,
        'location_label': name_of(query.location, 'label'),
        'tour_package_id': query.tour_package_id,
        'inquiry_id': query.inquiry_id,
        'tour_starts_from': plain(query.tour_starts_from),
        'tour_ends_on': plain(query.tour_ends_on),
        'total_price': query.total_price,
        'assigned_to': query.assigned_to,
        'is_featured': query.is_featured,
        'is_archived': query.is_archived,
        'updated_at': plain(query.updated_at),
    }


def query_dict(query) -> dict:
    data = columns_dict(query)
    data['location_label'] = name_of(query.location, 'label')
    data['images'] = [image_dict(i) for i in query.images]
    data['itineraries'] = [itinerary_dict(i) for i in query.itineraries]
    data['flight_details'] = [flight_dict(f) for f in query.flight_details]
    data['variant_snapshots'] = [snapshot_dict(s) for s in query.variant_snapshots]
    return data


# ==================== INQUIRIES ====================

def inquiry_summary(inquiry) -> dict:
    data = columns_dict(inquiry)
    data['location_label'] = name_of(inquiry.location, 'label')
    data['tour_package_query_ids'] = [q.id for q in inquiry.tour_package_queries]
    return data


def inquiry_dict(inquiry) -> dict:
    data = inquiry_summary(inquiry)
    data['created_by'] = name_of(inquiry.created_by, 'username')
    data['actions'] = [columns_dict(a) for a in inquiry.actions]
    data['tour_package_queries'] = [
        {'id': q.id, 'tour_package_query_number': q.tour_package_query_number,
         'tour_package_query_name': q.tour_package_query_name}
        for q in inquiry.tour_package_queries
    ]
    return data


# ==================== LEDGER ====================

def item_dict(item) -> dict:
    data = columns_dict(item)
    data['tax_slab_name'] = name_of(getattr(item, 'tax_slab', None))
    return data


def sale_dict(sale) -> dict:
    data = columns_dict(sale)
    data['customer_name'] = name_of(sale.customer)
    data['tour_package_query_name'] = name_of(sale.tour_package_query, 'tour_package_query_name')
    data['total_with_gst'] = float((sale.sale_price or 0) + (sale.gst_amount or 0))
    data['items'] = [item_dict(i) for i in sale.items]
    return data


def sale_return_dict(sale_return) -> dict:
    data = columns_dict(sale_return)
    sale = sale_return.sale_detail
    data['tour_package_query_id'] = sale.tour_package_query_id if sale else None
    data['customer_name'] = name_of(sale.customer) if sale else None
    data['invoice_number'] = sale.invoice_number if sale else None
    data['items'] = [columns_dict(i) for i in sale_return.items]
    return data


def purchase_dict(purchase) -> dict:
    data = columns_dict(purchase)
    data['supplier_name'] = name_of(purchase.supplier)
    data['tour_package_query_name'] = name_of(purchase.tour_package_query, 'tour_package_query_name')
    data['total_with_gst'] = float((purchase.price or 0) + (purchase.gst_amount or 0))
    data['items'] = [item_dict(i) for i in purchase.items]
    return data


def purchase_return_dict(purchase_return) -> dict:
    data = columns_dict(purchase_return)
    purchase = purchase_return.purchase_detail
    data['tour_package_query_id'] = purchase.tour_package_query_id if purchase else None
    data['supplier_name'] = name_of(purchase.supplier) if purchase else None
    data['bill_number'] = purchase.bill_number if purchase else None
    data['items'] = [columns_dict(i) for i in purchase_return.items]
    return data


def _account_names(record, data: dict) -> dict:
    data['bank_account_name'] = name_of(record.bank_account, 'account_name')
    data['cash_account_name'] = name_of(record.cash_account, 'account_name')
    return data


def receipt_dict(receipt) -> dict:
    data = columns_dict(receipt)
    data['customer_name'] = name_of(receipt.customer)
    data['tour_package_query_name'] = name_of(receipt.tour_package_query, 'tour_package_query_name')
    return _account_names(receipt, data)


def payment_dict(payment) -> dict:
    data = columns_dict(payment)
    data['supplier_name'] = name_of(payment.supplier)
    data['tour_package_query_name'] = name_of(payment.tour_package_query, 'tour_package_query_name')
    data['tds_deducted'] = float(sum((t.tds_amount or 0) for t in payment.tds_transactions))
    return _account_names(payment, data)


def expense_dict(expense) -> dict:
    data = columns_dict(expense)
    data['expense_category_name'] = name_of(expense.expense_category)
    data['tour_package_query_name'] = name_of(expense.tour_package_query, 'tour_package_query_name')
    data['images'] = [image_dict(i) for i in expense.images]
    return _account_names(expense, data)


def income_dict(income) -> dict:
    data = columns_dict(income)
    data['income_category_name'] = name_of(income.income_category)
    data['tour_package_query_name'] = name_of(income.tour_package_query, 'tour_package_query_name')
    return _account_names(income, data)


def transfer_dict(transfer) -> dict:
    data = columns_dict(transfer)
    source = transfer.from_bank_account or transfer.from_cash_account
    target = transfer.to_bank_account or transfer.to_cash_account
    data['from_account_name'] = name_of(source, 'account_name')
    data['to_account_name'] = name_of(target, 'account_name')
    return data


def accounts_dict(accounts: dict) -> dict:
    """Per-query accounts bundle as returned by the query service"""
    return {
        'tour_package_query': query_summary(accounts['tour_package_query']),
        'summary': amounts(accounts['summary']),
        'sale_details': [sale_dict(s) for s in accounts['sale_details']],
        'purchase_details': [purchase_dict(p) for p in accounts['purchase_details']],
        'sale_returns': [sale_return_dict(r) for r in accounts['sale_returns']],
        'purchase_returns': [purchase_return_dict(r) for r in accounts['purchase_returns']],
        'receipt_details': [receipt_dict(r) for r in accounts['receipt_details']],
        'payment_details': [payment_dict(p) for p in accounts['payment_details']],
        'expense_details': [expense_dict(e) for e in accounts['expense_details']],
        'income_details': [income_dict(i) for i in accounts['income_details']],
    }


# ==================== TDS ====================

def tds_transaction_dict(transaction) -> dict:
    data = columns_dict(transaction)
    data['supplier_name'] = name_of(transaction.supplier)
    return data


def tds_challan_dict(challan, with_transactions: bool = False) -> dict:
    data = columns_dict(challan, exclude=('deleted_at',))
    data['transaction_count'] = len(challan.transactions)
    data['total_tds'] = float(sum((t.tds_amount or 0) for t in challan.transactions))
    data['deposited'] = challan.deposit_date is not None
    if with_transactions:
        data['transactions'] = [tds_transaction_dict(t) for t in challan.transactions]
    return data


# ==================== DOWNLOADS ====================

def attachment(content: bytes, filename: str, media_type: str) -> StreamingResponse:
    return StreamingResponse(
        BytesIO(content),
        media_type=media_type,
        headers={"Content-Disposition": f"attachment; filename={filename}"}
    )
