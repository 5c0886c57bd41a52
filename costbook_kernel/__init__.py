"""
Costbook Kernel

Infrastructure and pure domain primitives for the fiscal period and
progress-based revenue recognition engine:
- Decimal-only Money with explicit half-up rounding
- Calendar-month arithmetic for fiscal years and forecast windows
- Typed exceptions with machine-readable codes
- Structured JSON logging
- Append-only persistence for audit rows
"""

__version__ = "0.1.0"
