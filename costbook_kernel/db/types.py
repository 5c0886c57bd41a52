"""
Module: costbook_kernel.db.types
Responsibility: Annotated type aliases and rounding helpers for column types.
    Centralizes precision and rounding so that every model and service uses
    identical definitions.
Architecture position: Kernel > DB.  May be imported by models, domain,
    services, and selectors.  MUST NOT import from any of those layers.

CRITICAL: No floats anywhere.  All monetary amounts and ratios use Decimal
with explicit precision.
"""

from decimal import ROUND_HALF_UP, Decimal, localcontext
from typing import Annotated

from sqlalchemy import BigInteger, Numeric, String

# Monetary amount: 38 digits total, 9 decimal places
Money = Annotated[Decimal, Numeric(38, 9)]

# Progress rate in percent (0..100)
Percent = Annotated[Decimal, Numeric(7, 4)]

# ISO 4217 currency code
CurrencyCode = Annotated[str, String(3)]

# Monotonic sequence number for ordering
Sequence = Annotated[int, BigInteger]

_RATIO_QUANTUM = Decimal("0.01")


def round_ratio(value: Decimal, rounding: str = ROUND_HALF_UP) -> Decimal:
    """Round a percentage or ratio to two decimal places, whatever its magnitude."""
    with localcontext() as ctx:
        # quantize needs room for every integer digit plus the two decimals
        ctx.prec = max(ctx.prec, value.adjusted() + 3)
        return value.quantize(_RATIO_QUANTUM, rounding=rounding)
