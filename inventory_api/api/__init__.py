from .auth import router as auth_router
from .products import router as products_router
from .chat import router as chat_router

__all__ = ["auth_router", "products_router", "chat_router"]
