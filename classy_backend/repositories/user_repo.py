# classy_backend/repositories/user_repo.py
from sqlmodel import Session

from classy_backend.models.user import User


class UserRepository:
    """
    Data access layer for User.

    Profiles are created by the auth dependency on first request, so only
    updates go through here.
    """

    def update(self, session: Session, user: User) -> User:
        """Persist changes to an existing User."""
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
