from typing import Sequence

from sqlalchemy.exc import IntegrityError


def is_unique_violation(error: IntegrityError, constraint_name: str, table: str, columns: Sequence[str]) -> bool:
    """
    True if the IntegrityError was raised by the given unique constraint.
    PostgreSQL and MySQL name the constraint in the message; SQLite lists the columns.
    """
    message = str(error.orig)
    if constraint_name in message:
        return True
    sqlite_columns = ", ".join(f"{table}.{column}" for column in columns)
    return f"UNIQUE constraint failed: {sqlite_columns}" in message
