import pytest
from datetime import date

from rentpay.payments import checkout
from rentpay.payments.errors import InvalidAmount, UnsupportedCurrency

def test_to_line_items_builds_single_rent_item(payment_factory):
    items = checkout.to_line_items(payment_factory(amount=1200.5, currency="USD"))
    assert items == [
        {
            "price_data": {
                "currency": "usd",
                "product_data": {
                    "name": "Rent Payment - Sunny Loft",
                    "description": "12 Kampala Road - Due 1/5/2026",
                },
                "unit_amount": 120050,
            },
            "quantity": 1,
        }
    ]

def test_to_line_items_ugx(payment_factory):
    items = checkout.to_line_items(payment_factory(amount=850000, currency="ugx"))
    assert items[0]["price_data"]["currency"] == "ugx"
    assert items[0]["price_data"]["unit_amount"] == 85000000

def test_to_line_items_propagates_amount_errors(payment_factory):
    with pytest.raises(InvalidAmount):
        checkout.to_line_items(payment_factory(amount=0))
    with pytest.raises(UnsupportedCurrency):
        checkout.to_line_items(payment_factory(currency="EUR"))

@pytest.mark.parametrize("value, expected", [
    ("2026-01-05", "1/5/2026"),
    ("2026-12-31T00:00:00+00:00", "12/31/2026"),
    (date(2026, 3, 9), "3/9/2026"),
    ("bientôt", "bientôt"),
])
def test_format_due_date(value, expected):
    assert checkout.format_due_date(value) == expected

def test_metadata_round_trip_through_event():
    event = {"data": {"object": {"metadata": checkout.make_metadata("pay-9")}}}
    assert checkout.extract_payment_id(event) == "pay-9"
    assert checkout.extract_payment_id({}) is None
