# classy_backend/services/review_service.py
from sqlmodel import Session

from classy_backend.models.review import Review
from classy_backend.repositories.review_repo import ReviewRepository
from classy_backend.schemas.review import ReviewCreate, ReviewCreated


class ReviewService:

    def __init__(self, repo: ReviewRepository):
        self.repo = repo

    def create_review(self, session: Session, payload: ReviewCreate) -> ReviewCreated:
        review = self.repo.create(
            session,
            Review(
                session_id=payload.session_id,
                rating=payload.rating,
                comments=payload.comments.strip(),
            ),
        )
        return ReviewCreated(review_id=review.id)
