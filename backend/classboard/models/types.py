"""
Column types shared by the models.
"""

from sqlalchemy import Numeric, Text
from sqlalchemy.types import TypeDecorator


class ScoreInteger(TypeDecorator):
    """
    Integer of unbounded size.

    Uses NUMERIC on PostgreSQL (arbitrary precision) and decimal text on
    other databases such as SQLite, whose INTEGER is limited to 64 bits.
    Values always come back as Python ints.
    """
    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        if dialect.name == "postgresql":
            return dialect.type_descriptor(Numeric(asdecimal=True))
        return dialect.type_descriptor(Text())

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        value = int(value)
        if dialect.name == "postgresql":
            return value
        return str(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return int(value)
