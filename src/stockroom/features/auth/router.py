"""Token issuance for staff accounts."""
import logging
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from typing import Annotated

from . import schemas
from . import security as auth_security
from . import service as auth_service
from .models import User as AuthUser

logger = logging.getLogger(__name__)
router = APIRouter(tags=["Authentication"], prefix="/auth")


@router.post("/token", response_model=schemas.Token)
async def login_for_access_token(
    form_data: Annotated[OAuth2PasswordRequestForm, Depends()]
):
    # The OAuth2 form calls it "username"; staff log in with their email
    user = await auth_service.get_user_by_email(form_data.username)
    if not user or not auth_security.verify_password(form_data.password, user.hashed_password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password",
            headers={"WWW-Authenticate": "Bearer"},
        )
    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Inactive user")
    logger.info(f"Issued access token for {user.email}")
    return {"access_token": auth_security.create_access_token(user.email), "token_type": "bearer"}


@router.get("/me", response_model=schemas.UserResponse)
async def read_current_user(
    current_user: Annotated[AuthUser, Depends(auth_security.get_current_active_user)]
):
    return schemas.UserResponse.model_validate(current_user)
