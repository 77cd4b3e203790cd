# shopapi/repositories/product_repo.py
from sqlmodel import Session, select

from shopapi.models.product import Product, ProductVariant


class ProductRepository:
    """
    Data access layer for Product & ProductVariant.

    - Pure DB operations (CRUD + queries).
    - No FastAPI, no business logic.
    - No commits: the service owns transaction boundaries.
    """

    # ----- Products -----

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def list_by_ids(self, session: Session, product_ids: list[int]) -> list[Product]:
        if not product_ids:
            return []
        stmt = select(Product).where(Product.id.in_(product_ids))
        return session.exec(stmt).all()

    def list_products(
        self,
        session: Session,
        skip: int = 0,
        limit: int = 100,
        newest_first: bool = False,
    ) -> list[Product]:
        stmt = select(Product)
        if newest_first:
            stmt = stmt.order_by(Product.created_at.desc(), Product.id.desc())
        else:
            stmt = stmt.order_by(Product.id)
        stmt = stmt.offset(skip).limit(limit)
        return session.exec(stmt).all()

    def add(self, session: Session, product: Product) -> Product:
        session.add(product)
        session.flush()
        session.refresh(product)
        return product

    def delete(self, session: Session, product: Product) -> None:
        session.delete(product)
        session.flush()

    # ----- Variants -----

    def get_variant(
        self,
        session: Session,
        product_id: int,
        variant_id: int,
    ) -> ProductVariant | None:
        """
        Variant by id, only if it belongs to the given product.
        """
        stmt = select(ProductVariant).where(
            ProductVariant.id == variant_id,
            ProductVariant.product_id == product_id,
        )
        return session.exec(stmt).first()

    def list_variants_for_product(
        self,
        session: Session,
        product_id: int,
    ) -> list[ProductVariant]:
        stmt = (
            select(ProductVariant)
            .where(ProductVariant.product_id == product_id)
            .order_by(ProductVariant.id)
        )
        return session.exec(stmt).all()

    def list_variants_for_products(
        self,
        session: Session,
        product_ids: list[int],
    ) -> list[ProductVariant]:
        if not product_ids:
            return []
        stmt = (
            select(ProductVariant)
            .where(ProductVariant.product_id.in_(product_ids))
            .order_by(ProductVariant.id)
        )
        return session.exec(stmt).all()

    def list_variants_by_ids(
        self,
        session: Session,
        variant_ids: list[int],
    ) -> list[ProductVariant]:
        if not variant_ids:
            return []
        stmt = select(ProductVariant).where(ProductVariant.id.in_(variant_ids))
        return session.exec(stmt).all()

    def add_variant(self, session: Session, variant: ProductVariant) -> ProductVariant:
        session.add(variant)
        session.flush()
        session.refresh(variant)
        return variant

    def delete_variant(self, session: Session, variant: ProductVariant) -> None:
        session.delete(variant)
        session.flush()

    def delete_variants_for_product(self, session: Session, product_id: int) -> None:
        for variant in self.list_variants_for_product(session, product_id):
            session.delete(variant)
        session.flush()
