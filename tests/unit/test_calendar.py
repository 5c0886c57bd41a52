"""
Unit tests for fiscal calendar arithmetic.

Verifies:
- Settlement month validation
- Forecast start month and 12-month window
- Fiscal year resolution and bounds
"""

from datetime import date

import pytest

from costbook_kernel.domain.calendar import (
    YearMonth,
    fiscal_year_bounds,
    forecast_window,
    next_forecast_start_month,
    resolve_fiscal_year,
    validate_positive_int,
    validate_settlement_month,
)
from costbook_kernel.exceptions import InvalidFiscalYearError, InvalidSettlementMonthError


class TestSettlementMonthValidation:
    @pytest.mark.parametrize("month", [1, 3, 12])
    def test_accepts_calendar_months(self, month):
        assert validate_settlement_month(month) == month

    @pytest.mark.parametrize("month", [0, 13, -1, "3", None, True, 3.0])
    def test_rejects_everything_else(self, month):
        with pytest.raises(InvalidSettlementMonthError):
            validate_settlement_month(month)

    def test_error_code(self):
        with pytest.raises(InvalidSettlementMonthError) as exc_info:
            validate_settlement_month(13)
        assert exc_info.value.code == "INVALID_SETTLEMENT_MONTH"

    def test_positive_int(self):
        assert validate_positive_int(2025) == 2025
        with pytest.raises(InvalidFiscalYearError):
            validate_positive_int(0)


class TestYearMonth:
    def test_parse_and_format(self):
        assert str(YearMonth.parse("2025-04")) == "2025-04"
        assert YearMonth.parse("2025-4") == YearMonth(2025, 4)

    @pytest.mark.parametrize("text", ["2025/04", "2025-13", "April", ""])
    def test_parse_rejects_malformed(self, text):
        with pytest.raises(ValueError):
            YearMonth.parse(text)

    def test_ordering_is_chronological(self):
        months = [YearMonth(2025, 1), YearMonth(2024, 12), YearMonth(2024, 2)]
        assert sorted(months) == [YearMonth(2024, 2), YearMonth(2024, 12), YearMonth(2025, 1)]

    def test_plus_months_crosses_years(self):
        assert YearMonth(2024, 11).plus_months(3) == YearMonth(2025, 2)
        assert YearMonth(2024, 1).plus_months(-1) == YearMonth(2023, 12)

    def test_contains(self):
        assert YearMonth(2025, 2).contains(date(2025, 2, 28))
        assert not YearMonth(2025, 2).contains(date(2025, 3, 1))


class TestForecastStartMonth:
    def test_december_rolls_into_next_year(self):
        assert next_forecast_start_month(2024, 12) == YearMonth(2025, 1)

    def test_june_settlement(self):
        assert next_forecast_start_month(2024, 6) == YearMonth(2024, 7)

    def test_window_for_september_settlement(self):
        window = forecast_window(2024, 9)
        assert window[0] == YearMonth(2024, 10)
        assert window[-1] == YearMonth(2025, 9)

    @pytest.mark.parametrize("month", range(1, 13))
    def test_window_is_twelve_consecutive_months(self, month):
        window = forecast_window(2024, month)
        assert len(window) == 12
        assert len(set(window)) == 12
        for earlier, later in zip(window, window[1:]):
            assert earlier.next() == later


class TestResolveFiscalYear:
    def test_march_settlement(self):
        assert resolve_fiscal_year(date(2025, 4, 1), 3) == 2025
        assert resolve_fiscal_year(date(2026, 3, 31), 3) == 2025

    def test_december_settlement_is_calendar_year(self):
        assert resolve_fiscal_year(date(2025, 1, 1), 12) == 2025
        assert resolve_fiscal_year(date(2025, 12, 31), 12) == 2025

    def test_settlement_month_itself_closes_previous_year(self):
        assert resolve_fiscal_year(date(2025, 9, 30), 9) == 2024
        assert resolve_fiscal_year(date(2025, 10, 1), 9) == 2025


class TestFiscalYearBounds:
    def test_march_settlement(self):
        assert fiscal_year_bounds(2024, 3) == (date(2024, 4, 1), date(2025, 4, 1))

    def test_december_settlement(self):
        assert fiscal_year_bounds(2024, 12) == (date(2024, 1, 1), date(2025, 1, 1))

    @pytest.mark.parametrize("month", range(1, 13))
    def test_bounds_agree_with_resolution(self, month):
        start, end = fiscal_year_bounds(2024, month)
        assert resolve_fiscal_year(start, month) == 2024
        assert resolve_fiscal_year(YearMonth.from_date(end).plus_months(-1).first_day, month) == 2024
        assert resolve_fiscal_year(end, month) == 2025
