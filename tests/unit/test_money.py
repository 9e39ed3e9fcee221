from decimal import Decimal

import pytest

from rentals.domain.value_objects.money import Money


class TestMoney:
    def test_of_rounds_half_up_to_cents(self):
        assert Money.of("10.005", "BRL").amount == Decimal("10.01")
        assert Money.of(50, "BRL").amount == Decimal("50.00")

    def test_multiply_rounds_to_cents(self):
        assert Money.of("33.33", "BRL").multiply(3).amount == Decimal("99.99")

    def test_negative_amount_fails(self):
        with pytest.raises(ValueError):
            Money(amount=Decimal("-1"), currency_code="BRL")

    def test_invalid_currency_fails(self):
        with pytest.raises(ValueError):
            Money(amount=Decimal("1"), currency_code="REAL")

    def test_str(self):
        assert str(Money.of("7.5", "BRL")) == "7.50 BRL"
