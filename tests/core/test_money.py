from decimal import Decimal

from src.shared.utils.money import round_money, sum_money, to_money


class TestRoundMoney:
    """Tests for round_money function."""

    def test_default_whole_units(self):
        """VND has no minor unit."""
        assert round_money(200000.5) == Decimal("200001")
        assert round_money(199999.4) == Decimal("199999")
        assert str(round_money(800000)) == "800000"

    def test_explicit_decimals(self):
        """ROUND_HALF_UP to two places."""
        assert round_money(10.125, decimals=2) == Decimal("10.13")
        assert round_money("10.124", decimals=2) == Decimal("10.12")
        assert str(round_money(10, decimals=2)) == "10.00"

    def test_from_string(self):
        assert round_money("450000") == Decimal("450000")

    def test_negative_numbers(self):
        """Negative halves round toward zero."""
        assert round_money("-10.5") == Decimal("-10")
        assert round_money("-10.6") == Decimal("-11")


class TestSumMoney:
    """Tests for sum_money function."""

    def test_sum(self):
        assert sum_money([Decimal("400000"), 400000]) == Decimal("800000")

    def test_empty(self):
        result = sum_money([])
        assert isinstance(result, Decimal)
        assert result == 0


class TestToMoney:
    """Tests for to_money function."""

    def test_keeps_fraction(self):
        assert to_money("150000.5") == Decimal("150000.5")
        assert to_money(0.1) == Decimal("0.1")

    def test_decimal_unchanged(self):
        value = Decimal("10.125")
        assert to_money(value) is value
