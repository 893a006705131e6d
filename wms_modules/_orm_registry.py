"""
Module ORM Registry (``wms_modules._orm_registry``).

Ensure all module-level SQLAlchemy ORM models are imported so that
``Base.metadata`` contains their table definitions before tables are
created.  Called by ``wms_kernel.db.engine.create_tables()`` and by the
file-database concurrency tests.
"""


def import_all_orm_models() -> None:
    """Import every ``wms_modules.*.orm`` module.  Idempotent."""
    # fmt: off
    import wms_modules.inventory.orm  # noqa: F401
    import wms_modules.inbound.orm  # noqa: F401
    # fmt: on
