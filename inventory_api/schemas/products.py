from pydantic import AllowInfNan, Field, Strict, StrictInt, StrictBool
from typing import Annotated, Optional
from datetime import datetime
from inventory_api.models.products import ProductCategory
from inventory_api.schemas.base import CamelModel

# Real numbers only: no strings, booleans, Infinity or NaN
Price = Annotated[float, Strict(), AllowInfNan(False)]

class ProductBase(CamelModel):
    name: str = Field(..., description="Product name")
    description: str = Field("", description="Free-text description")
    category: ProductCategory
    quantity: StrictInt = Field(..., description="Units in stock")
    unit_price: Price = Field(..., description="Price per unit")
    is_active: StrictBool = True

class ProductCreate(ProductBase):
    pass

class ProductUpdate(CamelModel):
    """Partial update; only the fields present in the request are applied."""
    name: Optional[str] = None
    description: Optional[str] = None
    category: Optional[ProductCategory] = None
    quantity: Optional[StrictInt] = None
    unit_price: Optional[Price] = None
    is_active: Optional[StrictBool] = None

class ProductResponse(ProductBase):
    id: str
    total_value: float
    owner_id: str
    created_at: datetime
    updated_at: datetime
