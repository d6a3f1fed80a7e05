"""
Request-scoped dependencies for the freezer API routes.
"""

from typing import Generator
from sqlalchemy.orm import Session
from domain.models import get_db_session


def get_db() -> Generator[Session, None, None]:
    """
    One session per request, closed when the response is sent.

    Handlers pass it straight to the services; every mutating service call
    opens its own ``unit_of_work`` on it, so a request never holds an
    uncommitted transaction between service calls. Tests replace this
    dependency with their in-memory session.
    """
    yield from get_db_session()
