# classy_backend/routers/users.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from classy_backend.core.auth import require_auth
from classy_backend.database import get_session
from classy_backend.models.user import User
from classy_backend.repositories.user_repo import UserRepository
from classy_backend.schemas.user import UserRead, UserUpdate
from classy_backend.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["Users"])

repo = UserRepository()
service = UserService(repo)


@router.get("/me", response_model=UserRead)
def read_me(current_user: User = Depends(require_auth)):
    """
    Return the authenticated user's profile.

    The profile row is auto-created on first request (auth dependency).
    """
    return current_user


@router.patch("/me", response_model=UserRead)
def update_me(
    payload: UserUpdate,
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Update name / phone / shipping address of the current user.
    """
    return service.update_me(session, current_user, payload)
