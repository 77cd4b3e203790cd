# shopapi/routers/admin_products.py
from fastapi import APIRouter, Depends, Response, status
from sqlmodel import Session

from shopapi.core.auth import require_admin
from shopapi.database import get_session
from shopapi.repositories.product_repo import ProductRepository
from shopapi.schemas.product import ProductRead, ProductWrite, VariantRead, VariantWrite
from shopapi.services.product_service import ProductService

router = APIRouter(
    prefix="/admin/products",
    tags=["Admin Products"],
    dependencies=[Depends(require_admin)],
)

service = ProductService(ProductRepository())


# -------- Products --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    List products with variants, newest first (admin only).
    """
    return service.list_products(session, skip=skip, limit=limit, newest_first=True)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    return service.get_product(session, product_id)


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    payload: ProductWrite,
    session: Session = Depends(get_session),
):
    """
    Create a new product (admin only). Returned with an empty variants list.
    """
    return service.create_product(session, payload)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: int,
    payload: ProductWrite,
    session: Session = Depends(get_session),
):
    """
    Replace a product's name, description, price and image (admin only).
    """
    return service.update_product(session, product_id, payload)


@router.delete("/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a product and its variants (admin only).
    """
    service.delete_product(session, product_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# -------- Variants --------


@router.post(
    "/{product_id}/variants",
    response_model=VariantRead,
    status_code=status.HTTP_201_CREATED,
)
def create_variant(
    product_id: int,
    payload: VariantWrite,
    session: Session = Depends(get_session),
):
    return service.create_variant(session, product_id, payload)


@router.put("/{product_id}/variants/{variant_id}", response_model=VariantRead)
def update_variant(
    product_id: int,
    variant_id: int,
    payload: VariantWrite,
    session: Session = Depends(get_session),
):
    return service.update_variant(session, product_id, variant_id, payload)


@router.delete(
    "/{product_id}/variants/{variant_id}",
    status_code=status.HTTP_204_NO_CONTENT,
)
def delete_variant(
    product_id: int,
    variant_id: int,
    session: Session = Depends(get_session),
):
    """
    Delete a variant. Order items keep their row with variant_id = null.
    """
    service.delete_variant(session, product_id, variant_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
