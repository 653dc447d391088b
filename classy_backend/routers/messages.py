# classy_backend/routers/messages.py
from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    UploadFile,
    status,
)
from sqlmodel import Session

from classy_backend.core.auth import require_auth, resolve_admin_actor
from classy_backend.core.storage_utils import ImageHost, get_image_host
from classy_backend.database import get_session
from classy_backend.models.user import User
from classy_backend.repositories.message_repo import MessageRepository
from classy_backend.schemas.message import (
    ContactResult,
    ContactSubmission,
    CustomPhotoRead,
    FormCategory,
    MessageRead,
)
from classy_backend.services.message_service import MessageService
from classy_backend.services.notification_service import NotificationService, get_notifier

router = APIRouter(tags=["Messages"])

repo = MessageRepository()
service = MessageService(repo)


# -------- Contact / custom requests --------


@router.post("/contact", response_model=ContactResult)
def submit_contact(
    name: str = Form(""),
    email: str = Form(""),
    phone: str | None = Form(None),
    type: str | None = Form(None),
    preference: str | None = Form(None),
    message: str | None = Form(None),
    custom_message: str | None = Form(None),
    form_category: FormCategory = Form("contact"),
    file: UploadFile | None = File(None),
    session: Session = Depends(get_session),
    notifier: NotificationService = Depends(get_notifier),
):
    """
    Contact form and custom jewelry request (multipart).

    - `form_category=custom` uses `custom_message` as the body.
    - Optional attachment up to 5MB is forwarded to the store inbox.
    - `notified` is false when the inbox email could not be sent;
      the message is stored either way.
    """
    submission = ContactSubmission(
        name=name,
        email=email,
        phone=phone,
        type=type,
        preference=preference,
        message=message,
        custom_message=custom_message,
        form_category=form_category,
    )

    attachment = None
    if file is not None and file.filename:
        attachment = (
            file.filename,
            file.content_type or "application/octet-stream",
            file.file.read(),
        )

    return service.submit_contact(session, submission, notifier, attachment)


@router.get("/account/messages", response_model=list[MessageRead])
def list_my_messages(
    session: Session = Depends(get_session),
    current_user: User = Depends(require_auth),
):
    """
    Messages sent from the current user's email address, newest first.
    """
    return service.list_for_email(session, current_user.email)


# -------- Custom design photos --------


@router.get("/custom-photos", response_model=list[CustomPhotoRead])
def list_custom_photos(session: Session = Depends(get_session)):
    return service.list_photos(session)


@router.post(
    "/admin/custom-photos",
    response_model=CustomPhotoRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(resolve_admin_actor)],
)
def upload_custom_photo(
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Add a photo to the custom-design gallery (JPEG, PNG, WEBP, max 5MB).
    """
    return service.add_photo(
        session,
        image_host,
        content_type=file.content_type,
        image_bytes=file.file.read(),
    )
