# classy_backend/services/product_service.py
import re
import uuid
from itertools import count

from fastapi import HTTPException, status
from sqlmodel import Session

from classy_backend.core.storage_utils import ImageHost
from classy_backend.models.product import Product
from classy_backend.repositories.product_repo import ProductRepository
from classy_backend.schemas.product import ProductCreate, ProductUpdate


class ProductService:
    """
    Business logic for the catalog.

    Responsibilities:
      - slug generation & uniqueness
      - image upload orchestration with the image host
      - admin-only operations (guarded at the router)
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _slugify(raw: str) -> str:
        """Oval Halo Ring (18k) -> oval-halo-ring-18k"""
        return re.sub(r"[^a-z0-9]+", "-", raw.lower()).strip("-") or "product"

    def _ensure_unique_slug(self, session: Session, base_slug: str) -> str:
        """First free slug among base, base-2, base-3, ..."""
        if self.repo.get_by_slug(session, base_slug) is None:
            return base_slug
        for n in count(2):
            candidate = f"{base_slug}-{n}"
            if self.repo.get_by_slug(session, candidate) is None:
                return candidate

    # ----- Public -----

    def list_products(
        self,
        session: Session,
        category: str | None = None,
        skip: int = 0,
        limit: int = 50,
    ) -> list[Product]:
        return self.repo.list(session, category=category, skip=skip, limit=limit)

    def get_by_slug(self, session: Session, slug: str) -> Product:
        product = self.repo.get_by_slug(session, slug)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    # ----- Admin -----

    def _get_or_404(self, session: Session, product_id: uuid.UUID) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def create_product(
        self,
        session: Session,
        payload: ProductCreate,
        image_host: ImageHost,
        content_type: str | None,
        image_bytes: bytes,
    ) -> Product:
        """
        Upload the product image, then insert the product with a unique slug.
        """
        image_url = image_host.upload("products", content_type, image_bytes)

        slug = self._ensure_unique_slug(session, self._slugify(payload.slug or payload.name))
        product = Product(
            name=payload.name,
            slug=slug,
            description=payload.description,
            price=payload.price,
            category=payload.category.lower(),
            image_url=image_url,
        )
        return self.repo.create(session, product)

    def update_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        payload: ProductUpdate,
    ) -> Product:
        product = self._get_or_404(session, product_id)
        changes = payload.model_dump(exclude_unset=True)

        if "slug" in changes and changes["slug"] is not None:
            new_slug = self._slugify(changes.pop("slug"))
            if new_slug != product.slug:
                product.slug = self._ensure_unique_slug(session, new_slug)
        changes.pop("slug", None)

        if changes.get("category"):
            changes["category"] = changes["category"].lower()

        for field, value in changes.items():
            if value is not None or field in ("description", "image_url"):
                setattr(product, field, value)

        return self.repo.update(session, product)

    def delete_product(
        self,
        session: Session,
        product_id: uuid.UUID,
        image_host: ImageHost,
    ) -> None:
        """
        Delete a catalog entry and its stored image.
        Past orders keep their own item snapshot.
        """
        product = self._get_or_404(session, product_id)
        if product.image_url:
            image_host.delete_public_url(product.image_url)
        self.repo.delete(session, product)
