from sqlalchemy.orm.exc import StaleDataError

from rentsphere.extensions import db
from rentsphere.utils.errors import Conflict


def commit_or_conflict(message="The rental request was modified concurrently, please retry"):
    """Commits the session; a lost optimistic-lock race becomes a Conflict."""
    try:
        db.session.commit()
    except StaleDataError:
        db.session.rollback()
        raise Conflict(message)
