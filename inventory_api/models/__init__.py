from .database import Base, get_db
from .users import User, UserRole
from .products import Product, ProductCategory

__all__ = [
    "Base",
    "get_db",
    "User",
    "UserRole",
    "Product",
    "ProductCategory",
]
