# models/columns.py
from sqlalchemy import DateTime
from sqlalchemy.types import TypeDecorator

from taskboard.utils import as_utc


class TZDateTime(TypeDecorator):
    """Timezone-aware UTC timestamps on every backend.

    PostgreSQL keeps the offset in ``timestamptz``; SQLite stores the UTC wall
    clock and hands back naive values, which are re-tagged as UTC on load.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return as_utc(value)

    def process_result_value(self, value, dialect):
        return as_utc(value)
