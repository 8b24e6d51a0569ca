from fastapi import APIRouter, Depends, Response, status

from inventory_api.config import Settings, get_settings
from inventory_api.core.security import clear_session_cookie, set_session_cookie
from inventory_api.models.users import User
from inventory_api.schemas.users import MessageResponse, UserCreate, UserLogin, UserResponse
from inventory_api.services.auth import AuthService
from inventory_api.api.deps import get_auth_service, get_current_user

router = APIRouter()

@router.post("/register", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def register(
    user: UserCreate,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
):
    """
    Create an account and start a session.

    - username, email and password are required
    - password must be at least 6 characters
    - role is "user" (default) or "admin"
    - username and email must both be unused
    """
    db_user, token = auth_service.register(user)
    set_session_cookie(response, token, settings)
    return db_user

@router.post("/login", response_model=UserResponse)
def login(
    credentials: UserLogin,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
    settings: Settings = Depends(get_settings)
):
    """Start a session. Unknown email and wrong password both answer "Invalid credentials"."""
    db_user, token = auth_service.login(credentials.email, credentials.password)
    set_session_cookie(response, token, settings)
    return db_user

@router.post("/logout", response_model=MessageResponse)
def logout(response: Response, settings: Settings = Depends(get_settings)):
    """Expire the session cookie. Safe to call without a session."""
    clear_session_cookie(response, settings)
    return MessageResponse(message="Logged out successfully")

@router.get("/profile", response_model=UserResponse)
def get_profile(
    current_user: User = Depends(get_current_user),
    auth_service: AuthService = Depends(get_auth_service)
):
    return auth_service.get_profile(current_user.id)

@router.get("/check", response_model=UserResponse)
def check_session(current_user: User = Depends(get_current_user)):
    """Report who the session cookie belongs to."""
    return current_user
