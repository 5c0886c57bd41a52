"""
costbook_modules.forecast
=========================

12-month cash-flow forecast from scheduled billing, subscription billing
and cost entries, opening from the latest bank balance.
"""

from costbook_modules.forecast.config import ForecastConfig
from costbook_modules.forecast.helpers import build_forecast
from costbook_modules.forecast.models import CashFlowForecast, ForecastRow, ForecastSummary
from costbook_modules.forecast.service import CashFlowForecastService

__all__ = [
    "CashFlowForecast",
    "CashFlowForecastService",
    "ForecastConfig",
    "ForecastRow",
    "ForecastSummary",
    "build_forecast",
]
