"""Authentication router module."""

from fastapi import APIRouter, Depends

from ...models import User
from ...schemas import LoginRequest, ProfileUpdate, RegisterRequest
from ...services.user_service import UserService
from ..dependencies import get_current_user, get_user_service

router = APIRouter(prefix="/auth", tags=["auth"])

@router.post("/register", status_code=201)
def register(payload: RegisterRequest, users: UserService = Depends(get_user_service)):
    """Create an account and sign in."""
    user, token = users.register(payload)
    return {"message": "User registered successfully", "user": users.serialize(user), "token": token}

@router.post("/login")
def login(payload: LoginRequest, users: UserService = Depends(get_user_service)):
    """Exchange credentials for a token."""
    user, token = users.login(payload)
    return {"message": "Login successful", "user": users.serialize(user), "token": token}

@router.get("/me")
def me(user: User = Depends(get_current_user), users: UserService = Depends(get_user_service)):
    """The authenticated user."""
    return {"user": users.serialize(user)}

@router.put("/profile")
def update_profile(
    payload: ProfileUpdate,
    user: User = Depends(get_current_user),
    users: UserService = Depends(get_user_service),
):
    """Update the authenticated user's name or avatar."""
    user = users.update_profile(user, payload)
    return {"message": "Profile updated successfully", "user": users.serialize(user)}
