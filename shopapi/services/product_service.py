# shopapi/services/product_service.py
import logging
from collections import defaultdict
from datetime import datetime, timezone

from fastapi import HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session

from shopapi.database import atomic
from shopapi.models.product import Product, ProductVariant
from shopapi.repositories.product_repo import ProductRepository
from shopapi.schemas.product import ProductRead, ProductWrite, VariantRead, VariantWrite

logger = logging.getLogger(__name__)


class ProductService:
    """
    Business logic for Product & ProductVariant.

    Responsibilities:
      - catalog reads with variants attached (one query for all variants)
      - admin CRUD (role enforced at router via require_admin)
      - product deletion together with its variants in one transaction
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _to_read(product: Product, variants: list[ProductVariant]) -> ProductRead:
        read = ProductRead.model_validate(product)
        read.variants = [VariantRead.model_validate(v) for v in variants]
        return read

    def _with_variants(
        self,
        session: Session,
        products: list[Product],
    ) -> list[ProductRead]:
        """
        Attach variants to a batch of products with a single query.
        """
        variants = self.repo.list_variants_for_products(
            session, [p.id for p in products]
        )
        by_product: dict[int, list[ProductVariant]] = defaultdict(list)
        for variant in variants:
            by_product[variant.product_id].append(variant)

        return [self._to_read(p, by_product.get(p.id, [])) for p in products]

    def _get_or_404(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def _get_variant_or_404(
        self,
        session: Session,
        product_id: int,
        variant_id: int,
    ) -> ProductVariant:
        variant = self.repo.get_variant(session, product_id, variant_id)
        if not variant:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Variant not found for this product",
            )
        return variant

    # ----- Products -----

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
        newest_first: bool = False,
    ) -> list[ProductRead]:
        products = self.repo.list_products(
            session, skip=skip, limit=limit, newest_first=newest_first
        )
        return self._with_variants(session, products)

    def get_product(self, session: Session, product_id: int) -> ProductRead:
        product = self._get_or_404(session, product_id)
        variants = self.repo.list_variants_for_product(session, product.id)
        return self._to_read(product, variants)

    def create_product(self, session: Session, payload: ProductWrite) -> ProductRead:
        """
        Create a product. A new product never has variants.
        """
        with atomic(session):
            product = self.repo.add(session, Product(**payload.model_dump()))
        session.refresh(product)
        return self._to_read(product, [])

    def update_product(
        self,
        session: Session,
        product_id: int,
        payload: ProductWrite,
    ) -> ProductRead:
        """
        Replace name, description, price and image of a product.
        """
        product = self._get_or_404(session, product_id)

        with atomic(session):
            product.name = payload.name
            product.description = payload.description
            product.price = payload.price
            product.image = payload.image
            product.updated_at = datetime.now(timezone.utc)
            self.repo.add(session, product)

        return self.get_product(session, product_id)

    def delete_product(self, session: Session, product_id: int) -> None:
        """
        Delete a product and all of its variants in one transaction.

        Order items of the product are removed by the database
        (ON DELETE CASCADE on order_items.product_id).
        """
        product = self._get_or_404(session, product_id)

        try:
            with atomic(session):
                self.repo.delete_variants_for_product(session, product.id)
                self.repo.delete(session, product)
        except SQLAlchemyError:
            logger.exception("Rolled back deletion of product %s", product_id)
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Failed to delete product",
            )
        logger.info("Deleted product %s with its variants", product_id)

    # ----- Variants -----

    def create_variant(
        self,
        session: Session,
        product_id: int,
        payload: VariantWrite,
    ) -> ProductVariant:
        product = self._get_or_404(session, product_id)
        with atomic(session):
            variant = self.repo.add_variant(
                session,
                ProductVariant(product_id=product.id, **payload.model_dump()),
            )
        session.refresh(variant)
        return variant

    def update_variant(
        self,
        session: Session,
        product_id: int,
        variant_id: int,
        payload: VariantWrite,
    ) -> ProductVariant:
        self._get_or_404(session, product_id)
        variant = self._get_variant_or_404(session, product_id, variant_id)

        with atomic(session):
            variant.name = payload.name
            variant.color = payload.color
            variant.size = payload.size
            variant.price = payload.price
            variant.stock = payload.stock
            variant.updated_at = datetime.now(timezone.utc)
            self.repo.add_variant(session, variant)

        session.refresh(variant)
        return variant

    def delete_variant(self, session: Session, product_id: int, variant_id: int) -> None:
        """
        Delete one variant.

        Order items that referenced it keep their row; the database sets
        their variant_id to NULL (ON DELETE SET NULL).
        """
        variant = self._get_variant_or_404(session, product_id, variant_id)
        with atomic(session):
            self.repo.delete_variant(session, variant)
