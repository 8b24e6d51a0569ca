from sqlalchemy.orm import Session
from typing import Any, Dict, List

from inventory_api.models.products import Product
from inventory_api.schemas.products import ProductCreate, ProductUpdate
from inventory_api.core.exceptions import NotFoundError, ValidationError

# Columns that may never be cleared through an update
REQUIRED_FIELDS = ("name", "category", "quantity", "unit_price", "is_active")

class ProductService:
    """Product CRUD where every query is filtered by the caller's user id."""

    def __init__(self, db: Session):
        self.db = db

    def validate_product_data(self, data: Dict[str, Any]) -> None:
        """
        Check the business rules on a create or update payload.
        Only keys present in ``data`` are checked.
        """
        for field in REQUIRED_FIELDS:
            if field in data and data[field] is None:
                raise ValidationError(f"{field} cannot be null")

        if "name" in data and not data["name"].strip():
            raise ValidationError("Product name is required")
        if "quantity" in data and data["quantity"] < 0:
            raise ValidationError("Quantity cannot be negative")
        if "unit_price" in data and data["unit_price"] < 0:
            raise ValidationError("Price cannot be negative")

    def create_product(self, product_data: ProductCreate, owner_id: str) -> Product:
        data = product_data.model_dump()
        self.validate_product_data(data)
        data["name"] = data["name"].strip()

        db_product = Product(**data, owner_id=owner_id)
        db_product.refresh_total_value()
        self.db.add(db_product)
        self.db.commit()
        self.db.refresh(db_product)
        return db_product

    def list_products(self, owner_id: str) -> List[Product]:
        return (
            self.db.query(Product)
            .filter(Product.owner_id == owner_id)
            .order_by(Product.created_at.desc())
            .all()
        )

    def get_product(self, product_id: str, owner_id: str) -> Product:
        # Someone else's product is reported exactly like a missing one
        product = self.db.query(Product).filter(
            Product.id == product_id,
            Product.owner_id == owner_id
        ).first()
        if not product:
            raise NotFoundError("Product")
        return product

    def update_product(self, product_id: str, product_data: ProductUpdate, owner_id: str) -> Product:
        data = product_data.model_dump(exclude_unset=True)
        self.validate_product_data(data)
        db_product = self.get_product(product_id, owner_id)

        if "name" in data:
            data["name"] = data["name"].strip()
        if data.get("description") is None:
            data.pop("description", None)
        for key, value in data.items():
            setattr(db_product, key, value)
        db_product.refresh_total_value()

        self.db.commit()
        self.db.refresh(db_product)
        return db_product

    def delete_product(self, product_id: str, owner_id: str) -> Product:
        db_product = self.get_product(product_id, owner_id)
        self.db.delete(db_product)
        self.db.commit()
        return db_product
