"""
Module ORM Registry (``costbook_modules._orm_registry``).

Ensure every SQLAlchemy ORM model is imported so that ``Base.metadata``
contains its table before tables are created, and install the ORM
listeners that guard append-only tables.

Scripts, entrypoints and ``tests/conftest.py`` all call
``create_all_tables()``.
"""


def import_all_orm_models() -> None:
    """Import the kernel counter table and every ``costbook_modules.*.orm`` module.

    Idempotent -- repeated calls are harmless.
    """
    import costbook_kernel.services.sequence_service  # noqa: F401
    # fmt: off
    import costbook_modules.project.orm  # noqa: F401
    import costbook_modules.fiscal.orm  # noqa: F401
    import costbook_modules.ledger.orm  # noqa: F401
    import costbook_modules.billing.orm  # noqa: F401
    # fmt: on


def create_all_tables() -> None:
    """Register all ORM models, create every table, and register listeners."""
    from costbook_kernel.db.engine import create_tables
    from costbook_kernel.db.immutability import register_immutability_listeners

    import_all_orm_models()
    create_tables()
    register_immutability_listeners()
