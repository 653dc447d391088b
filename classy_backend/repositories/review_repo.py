# classy_backend/repositories/review_repo.py
from sqlmodel import Session, select

from classy_backend.models.review import Review


class ReviewRepository:

    def create(self, session: Session, review: Review) -> Review:
        session.add(review)
        session.commit()
        session.refresh(review)
        return review

    def list_for_session(self, session: Session, session_id: str) -> list[Review]:
        stmt = select(Review).where(Review.session_id == session_id)
        return session.exec(stmt).all()
