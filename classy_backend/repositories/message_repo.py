# classy_backend/repositories/message_repo.py
from sqlmodel import Session, select

from classy_backend.models.message import ContactMessage, CustomPhoto


class MessageRepository:
    """Contact messages and custom-design photos."""

    # ----- Contact messages -----

    def create_message(self, session: Session, message: ContactMessage) -> ContactMessage:
        session.add(message)
        session.commit()
        session.refresh(message)
        return message

    def list_for_email(self, session: Session, email: str) -> list[ContactMessage]:
        stmt = (
            select(ContactMessage)
            .where(ContactMessage.email == email)
            .order_by(ContactMessage.submitted_at.desc())
        )
        return session.exec(stmt).all()

    # ----- Custom photos -----

    def create_photo(self, session: Session, photo: CustomPhoto) -> CustomPhoto:
        session.add(photo)
        session.commit()
        session.refresh(photo)
        return photo

    def list_photos(self, session: Session) -> list[CustomPhoto]:
        stmt = select(CustomPhoto).order_by(CustomPhoto.created_at.desc())
        return session.exec(stmt).all()
