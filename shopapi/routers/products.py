# shopapi/routers/products.py
from fastapi import APIRouter, Depends
from sqlmodel import Session

from shopapi.database import get_session
from shopapi.repositories.product_repo import ProductRepository
from shopapi.schemas.product import ProductRead
from shopapi.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    skip: int = 0,
    limit: int = 100,
):
    """
    List products with their variants.

    - Public endpoint.
    """
    return service.list_products(session, skip=skip, limit=limit)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int,
    session: Session = Depends(get_session),
):
    """
    Get a single product (with variants) by id.

    - Public endpoint.
    """
    return service.get_product(session, product_id)
