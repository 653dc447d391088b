# classy_backend/routers/products.py
import uuid

from fastapi import (
    APIRouter,
    Depends,
    File,
    Form,
    UploadFile,
    status,
)
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlmodel import Session

from classy_backend.core.auth import resolve_admin_actor
from classy_backend.core.storage_utils import ImageHost, get_image_host
from classy_backend.database import get_session
from classy_backend.repositories.product_repo import ProductRepository
from classy_backend.schemas.product import ProductCreate, ProductRead, ProductUpdate
from classy_backend.services.product_service import ProductService

router = APIRouter(tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("/products", response_model=list[ProductRead])
def list_products(
    category: str | None = None,
    skip: int = 0,
    limit: int = 50,
    session: Session = Depends(get_session),
):
    """
    List catalog entries, newest first.

    - Public endpoint.
    - `category` filters on the lower-cased category name.
    """
    return service.list_products(
        session,
        category=category.lower() if category else None,
        skip=skip,
        limit=limit,
    )


@router.get("/products/{slug}", response_model=ProductRead)
def get_product(
    slug: str,
    session: Session = Depends(get_session),
):
    """
    Product detail page lookup by slug.
    """
    return service.get_by_slug(session, slug)


# -------- Admin endpoints --------


@router.post(
    "/admin/products",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(resolve_admin_actor)],
)
def create_product(
    name: str = Form(...),
    price: float = Form(...),
    category: str = Form(...),
    slug: str | None = Form(None),
    description: str | None = Form(None),
    file: UploadFile = File(...),
    session: Session = Depends(get_session),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Create a product from multipart form data with its image.

    - Accepts JPEG, PNG, WEBP (max 5MB).
    - Slug is generated from the name when omitted.
    """
    try:
        payload = ProductCreate(
            name=name,
            price=price,
            category=category,
            slug=slug,
            description=description,
        )
    except ValidationError as exc:
        raise RequestValidationError(exc.errors(include_context=False))

    return service.create_product(
        session,
        payload,
        image_host,
        content_type=file.content_type,
        image_bytes=file.file.read(),
    )


@router.patch(
    "/admin/products/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(resolve_admin_actor)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    return service.update_product(session, product_id, payload)


@router.delete(
    "/admin/products/{product_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    dependencies=[Depends(resolve_admin_actor)],
)
def delete_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    image_host: ImageHost = Depends(get_image_host),
):
    """
    Delete a product and its stored image.
    """
    service.delete_product(session, product_id, image_host)
    return None
