"""
Shared SQLAlchemy MetaData for tables declared with SQLAlchemy Core.

The repositories never read this: they build SQL from entity reflection. It exists so
applications (and the test suite) can declare and create their tables with
consistent constraint names.
"""

from sqlalchemy import MetaData

# Naming convention for constraints and indexes
NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "pk": "pk_%(table_name)s",
}

metadata = MetaData(naming_convention=NAMING_CONVENTION)
