# classy_backend/services/user_service.py
from sqlmodel import Session

from classy_backend.models.user import User
from classy_backend.repositories.user_repo import UserRepository
from classy_backend.schemas.user import UserUpdate


class UserService:
    """
    Account profile operations for the authenticated customer.
    """

    def __init__(self, repo: UserRepository):
        self.repo = repo

    def update_me(
        self,
        session: Session,
        current_user: User,
        payload: UserUpdate,
    ) -> User:
        """
        Partial update: only fields present in the payload are written.
        """
        for field, value in payload.model_dump(exclude_unset=True).items():
            if field == "name" and value is None:
                continue
            setattr(current_user, field, value)

        return self.repo.update(session, current_user)
