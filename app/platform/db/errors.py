from sqlalchemy.exc import IntegrityError

UNIQUE_VIOLATION_SQLSTATE = "23505"


def is_unique_violation(exc: Exception) -> bool:
    """
    True when an IntegrityError was raised by a UNIQUE constraint,
    as opposed to NOT NULL, foreign key or check failures.
    """
    if not isinstance(exc, IntegrityError):
        return False

    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if sqlstate:
        return sqlstate == UNIQUE_VIOLATION_SQLSTATE

    message = str(orig).lower()
    return "unique constraint" in message or "duplicate key" in message
