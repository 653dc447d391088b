# classy_backend/services/message_service.py
import logging

from fastapi import HTTPException, status
from sqlmodel import Session

from classy_backend.core.storage_utils import ImageHost, MAX_IMAGE_BYTES
from classy_backend.models.message import ContactMessage, CustomPhoto
from classy_backend.repositories.message_repo import MessageRepository
from classy_backend.schemas.message import ContactResult, ContactSubmission
from classy_backend.services.notification_service import NotificationService

logger = logging.getLogger(__name__)


class MessageService:
    """
    Contact / custom-jewelry requests and the custom-design photo gallery.
    """

    def __init__(self, repo: MessageRepository):
        self.repo = repo

    def submit_contact(
        self,
        session: Session,
        submission: ContactSubmission,
        notifier: NotificationService,
        attachment: tuple[str, str, bytes] | None = None,
    ) -> ContactResult:
        """
        Store the message, then email the store inbox (best-effort).

        Raises:
            HTTPException(400): name, email or message body missing.
            HTTPException(413): attachment larger than 5MB.
        """
        if not submission.name.strip() or not submission.email.strip() or not submission.body:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="Missing required fields",
            )

        if attachment and len(attachment[2]) > MAX_IMAGE_BYTES:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail="Attachment too large (max 5MB).",
            )

        message = ContactMessage(
            **submission.model_dump(),
            has_file=attachment is not None,
        )
        self.repo.create_message(session, message)
        logger.info("Stored %s message %s from %s", message.form_category, message.id, message.email)

        notified = notifier.send_contact_message(submission, attachment)
        return ContactResult(notified=notified)

    def list_for_email(self, session: Session, email: str) -> list[ContactMessage]:
        return self.repo.list_for_email(session, email)

    # ----- Custom photos -----

    def list_photos(self, session: Session) -> list[CustomPhoto]:
        return self.repo.list_photos(session)

    def add_photo(
        self,
        session: Session,
        image_host: ImageHost,
        content_type: str | None,
        image_bytes: bytes,
    ) -> CustomPhoto:
        image_url = image_host.upload("custom", content_type, image_bytes)
        return self.repo.create_photo(session, CustomPhoto(image_url=image_url))
