"""
scada/DB/base_class.py
=================================
SQLAlchemy Base Model Definition
=================================

Declarative base for every table in the SCADA backend (SQLAlchemy 2.0 style).
Table names default to the lowercase class name; the models in scada/Models
override this with their plural table names.

Note:
    All models must inherit from this Base to be registered in
    Base.metadata, which create_all_tables() relies on.
"""

from sqlalchemy.orm import DeclarativeBase, declared_attr


class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy models in the application.

    Class Attributes:
        __tablename__: Generated from the class name (lowercase) unless the
            model declares its own.
    """

    @declared_attr.directive
    def __tablename__(cls) -> str:
        return cls.__name__.lower()
