"""
Typed Exception Hierarchy for the Costbook Kernel.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers (the HTTP layer, batch scripts, tests) must be able to tell a
rejected input from a duplicate ledger month from a tenant that was never
initialized, without parsing message strings.  Every error therefore has:
  1. a TYPED exception class (catch by type, not message)
  2. a CODE class attribute (machine-readable, API-safe)
  3. structured DATA attributes (not just a message string)

Example:
    try:
        ledger.upsert_month(...)
    except LedgerMonthConflictError as e:
        api_response(code=e.code, month=e.balance_month)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from CostbookError:

    CostbookError (base)
    |
    +-- ValidationError
    |   +-- MissingFieldError
    |   +-- InvalidSettlementMonthError
    |   +-- InvalidFiscalYearError
    |   +-- InvalidProgressRateError
    |   +-- InvalidAmountError
    |   +-- NoFiscalChangeError
    |
    +-- ConflictError
    |   +-- FiscalInfoConflictError
    |   +-- LedgerMonthConflictError
    |   +-- ScheduledBillingConflictError
    |
    +-- NotFoundError
    |   +-- FiscalInfoNotFoundError
    |   +-- LedgerNotFoundError
    |   +-- LedgerEntryNotFoundError
    |   +-- ProjectNotFoundError
    |
    +-- AuthorizationError
    |   +-- CrossTenantAccessError
    |
    +-- CurrencyError
    |   +-- InvalidCurrencyError
    |   +-- CurrencyMismatchError
    |
    +-- ConcurrencyError
    |   +-- OptimisticLockError
    |
    +-- ImmutabilityError
        +-- ImmutabilityViolationError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                          | When Raised
----------------|-------------------------------|---------------------------------------
Validation      | MISSING_FIELD                 | Required field absent or blank
                | INVALID_SETTLEMENT_MONTH      | Settlement month outside 1..12
                | INVALID_FISCAL_YEAR           | Fiscal year / period not positive
                | INVALID_PROGRESS_RATE         | Progress rate outside 0..100
                | INVALID_AMOUNT                | Negative amount where forbidden
                | NO_FISCAL_CHANGE              | Change request equals current definition
----------------|-------------------------------|---------------------------------------
Conflict        | FISCAL_INFO_CONFLICT          | Fiscal info already initialized for year
                | LEDGER_MONTH_CONFLICT         | Duplicate (company, fiscal year, month)
                | SCHEDULED_BILLING_CONFLICT    | Duplicate (project, year_month)
----------------|-------------------------------|---------------------------------------
Not found       | FISCAL_INFO_NOT_FOUND         | Tenant never initialized (fatal)
                | LEDGER_NOT_FOUND              | Tenant has no ledger rows (soft)
                | LEDGER_ENTRY_NOT_FOUND        | Ledger row id doesn't exist
                | PROJECT_NOT_FOUND             | Project id doesn't exist
----------------|-------------------------------|---------------------------------------
Authorization   | CROSS_TENANT_ACCESS           | Entity belongs to another company
----------------|-------------------------------|---------------------------------------
Currency        | INVALID_CURRENCY              | Not a valid ISO 4217 code
                | CURRENCY_MISMATCH             | Mixed currencies in operation
----------------|-------------------------------|---------------------------------------
Concurrency     | OPTIMISTIC_LOCK_CONFLICT      | Fiscal info modified concurrently
----------------|-------------------------------|---------------------------------------
Immutability    | IMMUTABILITY_VIOLATION        | Update/delete of an append-only row

===============================================================================
HANDLING PATTERNS
===============================================================================

1. "No ledger rows" is soft, "no fiscal info" is fatal:

    try:
        opening = ledger.latest_closing_balance(company_id)
    except LedgerNotFoundError:
        opening = Money.zero(currency)

2. Authorization errors are always fatal.  Never log-and-continue a
   CrossTenantAccessError.

3. Nothing here is retried.  Retries belong to the storage/transport layer.

===============================================================================
"""


class CostbookError(Exception):
    """
    Base exception for all costbook errors.

    All subclasses must have a `code` class attribute for machine-readable
    error identification.
    """

    code: str = "COSTBOOK_ERROR"


# Validation exceptions


class ValidationError(CostbookError):
    """Input rejected before any write."""

    code: str = "VALIDATION_ERROR"


class MissingFieldError(ValidationError):
    """A required field was not provided."""

    code: str = "MISSING_FIELD"

    def __init__(self, field_name: str):
        self.field_name = field_name
        super().__init__(f"Missing required field: {field_name}")


class InvalidSettlementMonthError(ValidationError):
    """Settlement month must be within 1..12."""

    code: str = "INVALID_SETTLEMENT_MONTH"

    def __init__(self, settlement_month: object):
        self.settlement_month = settlement_month
        super().__init__(
            f"Invalid settlement month: {settlement_month!r} (expected 1..12)"
        )


class InvalidFiscalYearError(ValidationError):
    """Fiscal year or period index is not a positive integer."""

    code: str = "INVALID_FISCAL_YEAR"

    def __init__(self, value: object, field_name: str = "fiscal_year"):
        self.value = value
        self.field_name = field_name
        super().__init__(f"Invalid {field_name}: {value!r}")


class InvalidProgressRateError(ValidationError):
    """Progress rate must be within 0..100."""

    code: str = "INVALID_PROGRESS_RATE"

    def __init__(self, progress_rate: object, record_id: str | None = None):
        self.progress_rate = progress_rate
        self.record_id = record_id
        super().__init__(
            f"Invalid progress rate {progress_rate!r} (expected 0..100)"
            + (f" on record {record_id}" if record_id else "")
        )


class InvalidAmountError(ValidationError):
    """Amount is negative where only non-negative values are allowed."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field_name: str, amount: str):
        self.field_name = field_name
        self.amount = amount
        super().__init__(f"Invalid {field_name}: {amount} (must not be negative)")


class NoFiscalChangeError(ValidationError):
    """Requested fiscal definition equals the current one."""

    code: str = "NO_FISCAL_CHANGE"

    def __init__(self, company_id: str, fiscal_year: int, settlement_month: int):
        self.company_id = company_id
        self.fiscal_year = fiscal_year
        self.settlement_month = settlement_month
        super().__init__(
            f"Fiscal definition for company {company_id} is already "
            f"{fiscal_year}/{settlement_month}"
        )


# Conflict exceptions


class ConflictError(CostbookError):
    """A storage uniqueness rule would be violated."""

    code: str = "CONFLICT"


class FiscalInfoConflictError(ConflictError):
    """Fiscal info already exists for this company and fiscal year."""

    code: str = "FISCAL_INFO_CONFLICT"

    def __init__(self, company_id: str, fiscal_year: int):
        self.company_id = company_id
        self.fiscal_year = fiscal_year
        super().__init__(
            f"Fiscal info already exists for company {company_id}, "
            f"fiscal year {fiscal_year}"
        )


class LedgerMonthConflictError(ConflictError):
    """A ledger row already exists for (company, fiscal year, month)."""

    code: str = "LEDGER_MONTH_CONFLICT"

    def __init__(self, company_id: str, fiscal_year: int, balance_month: str):
        self.company_id = company_id
        self.fiscal_year = fiscal_year
        self.balance_month = balance_month
        super().__init__(
            f"Ledger row already exists for company {company_id}, "
            f"fiscal year {fiscal_year}, month {balance_month}"
        )


class ScheduledBillingConflictError(ConflictError):
    """A scheduled billing row already exists for (project, year_month)."""

    code: str = "SCHEDULED_BILLING_CONFLICT"

    def __init__(self, project_id: str, year_month: str):
        self.project_id = project_id
        self.year_month = year_month
        super().__init__(
            f"Scheduled billing already exists for project {project_id} "
            f"in {year_month}"
        )


# Not-found exceptions


class NotFoundError(CostbookError):
    """Requested entity does not exist."""

    code: str = "NOT_FOUND"


class FiscalInfoNotFoundError(NotFoundError):
    """Tenant has never been initialized with a fiscal calendar."""

    code: str = "FISCAL_INFO_NOT_FOUND"

    def __init__(self, company_id: str):
        self.company_id = company_id
        super().__init__(f"No fiscal info for company {company_id}")


class LedgerNotFoundError(NotFoundError):
    """Tenant has no bank balance ledger rows."""

    code: str = "LEDGER_NOT_FOUND"

    def __init__(self, company_id: str):
        self.company_id = company_id
        super().__init__(f"No bank balance history for company {company_id}")


class LedgerEntryNotFoundError(NotFoundError):
    """Ledger row with the given id does not exist."""

    code: str = "LEDGER_ENTRY_NOT_FOUND"

    def __init__(self, entry_id: str):
        self.entry_id = entry_id
        super().__init__(f"Bank balance entry not found: {entry_id}")


class ProjectNotFoundError(NotFoundError):
    """Project with the given id does not exist."""

    code: str = "PROJECT_NOT_FOUND"

    def __init__(self, project_id: str):
        self.project_id = project_id
        super().__init__(f"Project not found: {project_id}")


# Authorization exceptions


class AuthorizationError(CostbookError):
    """Access outside the caller's tenant.  Always fatal."""

    code: str = "AUTHORIZATION_ERROR"


class CrossTenantAccessError(AuthorizationError):
    """An entity owned by one company was addressed through another."""

    code: str = "CROSS_TENANT_ACCESS"

    def __init__(self, entity_type: str, entity_id: str, company_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.company_id = company_id
        super().__init__(
            f"{entity_type} {entity_id} does not belong to company {company_id}"
        )


# Currency exceptions


class CurrencyError(CostbookError):
    """Base exception for currency-related errors."""

    code: str = "CURRENCY_ERROR"


class InvalidCurrencyError(CurrencyError):
    """Currency code is not a valid ISO 4217 code."""

    code: str = "INVALID_CURRENCY"

    def __init__(self, currency: str):
        self.currency = currency
        super().__init__(f"Invalid ISO 4217 currency code: '{currency}'")


class CurrencyMismatchError(CurrencyError):
    """Amounts in different currencies were combined."""

    code: str = "CURRENCY_MISMATCH"

    def __init__(self, expected: str, received: str):
        self.expected = expected
        self.received = received
        super().__init__(f"Currency mismatch: expected {expected}, got {received}")


# Concurrency exceptions


class ConcurrencyError(CostbookError):
    """Base exception for concurrency-related errors."""

    code: str = "CONCURRENCY_ERROR"


class OptimisticLockError(ConcurrencyError):
    """Optimistic locking conflict detected."""

    code: str = "OPTIMISTIC_LOCK_CONFLICT"

    def __init__(self, entity_type: str, entity_id: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(
            f"Optimistic lock conflict on {entity_type} {entity_id}: "
            "entity was modified by another transaction"
        )


# Immutability exceptions


class ImmutabilityError(CostbookError):
    """Base exception for immutability-related errors."""

    code: str = "IMMUTABILITY_ERROR"


class ImmutabilityViolationError(ImmutabilityError):
    """
    Attempted to modify or delete an append-only record.

    FiscalPeriodChange rows are immutable from creation.
    """

    code: str = "IMMUTABILITY_VIOLATION"

    def __init__(self, entity_type: str, entity_id: str, reason: str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.reason = reason
        super().__init__(
            f"Immutability violation on {entity_type} {entity_id}: {reason}"
        )
