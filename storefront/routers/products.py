import uuid

from fastapi import APIRouter, Depends, status
from sqlmodel import Session

from storefront.core.auth import get_current_user, require_admin
from storefront.database import get_session
from storefront.models.user import User
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import (
    ProductCreate,
    ProductRead,
    ProductUpdate,
    VariationCreate,
    VariationRead,
    VariationUpdate,
)
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)


# -------- Public endpoints --------


@router.get("", response_model=list[ProductRead])
def list_products(
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
    skip: int = 0,
    limit: int = 50,
    category: str | None = None,
    search: str | None = None,
    min_price: float | None = None,
    max_price: float | None = None,
    in_stock: bool = False,
):
    """
    List active products with their variations.

    - Public endpoint; signed-in members see their tier price in
      `discounted_price`.
    """
    return service.list_products(
        session,
        tier=current_user.tier if current_user else None,
        skip=skip,
        limit=limit,
        category=category,
        search=search,
        min_price=min_price,
        max_price=max_price,
        in_stock=in_stock,
    )


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: uuid.UUID,
    session: Session = Depends(get_session),
    current_user: User | None = Depends(get_current_user),
):
    """
    Get a single product with tier-priced variations.
    """
    return service.get_product_read(
        session,
        product_id,
        tier=current_user.tier if current_user else None,
    )


# -------- Admin endpoints --------


@router.post(
    "",
    response_model=ProductRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def create_product(
    payload: ProductCreate,
    session: Session = Depends(get_session),
):
    return service.create_product(session, payload)


@router.patch(
    "/{product_id}",
    response_model=ProductRead,
    dependencies=[Depends(require_admin)],
)
def update_product(
    product_id: uuid.UUID,
    payload: ProductUpdate,
    session: Session = Depends(get_session),
):
    return service.update_product(session, product_id, payload)


@router.post(
    "/{product_id}/variations",
    response_model=VariationRead,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin)],
)
def add_variation(
    product_id: uuid.UUID,
    payload: VariationCreate,
    session: Session = Depends(get_session),
):
    """
    Add a purchasable variation (size/colour) to a product.
    """
    return service.add_variation(session, product_id, payload)


@router.patch(
    "/variations/{variation_id}",
    response_model=VariationRead,
    dependencies=[Depends(require_admin)],
)
def update_variation(
    variation_id: uuid.UUID,
    payload: VariationUpdate,
    session: Session = Depends(get_session),
):
    """
    Reprice or restock a variation.
    """
    return service.update_variation(session, variation_id, payload)
