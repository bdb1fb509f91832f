"""User routes"""

from fastapi import APIRouter, Depends

from rudra.api.deps import get_current_user
from rudra.models.user import User
from rudra.schemas.user import UserResponse

router = APIRouter()


@router.get("/me", response_model=UserResponse)
def get_my_profile(
    current_user: User = Depends(get_current_user)
):
    """
    Get current user profile

    Args:
        current_user: User resolved from the bearer access token

    Returns:
        User profile
    """
    return UserResponse.model_validate(current_user)
