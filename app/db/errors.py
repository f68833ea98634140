# app/db/errors.py
from sqlalchemy.exc import IntegrityError

PG_UNIQUE_VIOLATION = "23505"


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the store rejected a row because of a unique constraint."""
    orig = getattr(exc, "orig", None)
    if getattr(orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    # sqlite (local/test) only reports it in the message
    return "UNIQUE constraint failed" in str(orig)
