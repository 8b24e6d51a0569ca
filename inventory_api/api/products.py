from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session
from typing import List

from inventory_api.models.database import get_db
from inventory_api.models.users import User
from inventory_api.schemas.products import ProductCreate, ProductResponse, ProductUpdate
from inventory_api.services.products import ProductService
from inventory_api.api.deps import get_current_user

router = APIRouter()

@router.get("", response_model=List[ProductResponse])
def list_products(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """List the caller's products"""
    product_service = ProductService(db)
    return product_service.list_products(current_user.id)

@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Get one of the caller's products; other users' products are reported as missing"""
    product_service = ProductService(db)
    return product_service.get_product(product_id, current_user.id)

@router.post("", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(
    product: ProductCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Create a product owned by the caller.
    totalValue is always computed as quantity x unitPrice.
    """
    product_service = ProductService(db)
    return product_service.create_product(product, current_user.id)

@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: str,
    product: ProductUpdate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Update a product; only the supplied fields change"""
    product_service = ProductService(db)
    return product_service.update_product(product_id, product, current_user.id)

@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Delete a product"""
    product_service = ProductService(db)
    product_service.delete_product(product_id, current_user.id)
    return {}
