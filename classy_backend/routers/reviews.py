# classy_backend/routers/reviews.py
from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from classy_backend.database import get_session
from classy_backend.repositories.review_repo import ReviewRepository
from classy_backend.schemas.review import ReviewCreate, ReviewCreated
from classy_backend.services.review_service import ReviewService

router = APIRouter(prefix="/reviews", tags=["Reviews"])

service = ReviewService(ReviewRepository())


@router.post(
    "",
    response_model=ReviewCreated,
    status_code=status.HTTP_201_CREATED,
)
def create_review(
    payload: ReviewCreate,
    session: Session = Depends(get_session),
):
    """
    Post-checkout feedback, keyed by the checkout session id.
    """
    return service.create_review(session, payload)
