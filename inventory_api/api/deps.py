from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from inventory_api.config import Settings, get_settings
from inventory_api.models.database import get_db
from inventory_api.models.users import User
from inventory_api.services.ai_client import TextGenerator, UnconfiguredTextGenerator, build_text_generator
from inventory_api.services.auth import AuthService
from inventory_api.services.memory import ConversationMemory


def get_auth_service(
    db: Session = Depends(get_db),
    settings: Settings = Depends(get_settings)
) -> AuthService:
    return AuthService(db, settings)


def get_current_user(
    request: Request,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
) -> User:
    """Resolve the session cookie to a user, or fail with 401/404 before the route runs."""
    token: Optional[str] = request.cookies.get(settings.SESSION_COOKIE_NAME)
    return auth_service.validate_session(token)


def get_conversation_memory(request: Request) -> ConversationMemory:
    return request.app.state.conversation_memory


def get_text_generator(
    request: Request,
    settings: Settings = Depends(get_settings)
) -> TextGenerator:
    """
    The AI client built at startup, or built here on first use. Without a key
    the returned generator fails every call with ConfigurationError, so input
    validation still runs before the missing key is reported.
    """
    generator = getattr(request.app.state, "text_generator", None)
    if generator is None:
        if not settings.GEMINI_API_KEY:
            return UnconfiguredTextGenerator()
        generator = build_text_generator(settings)
        request.app.state.text_generator = generator
    return generator
