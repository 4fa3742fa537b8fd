# mediatree/api/v1/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm

from mediatree.core.security import create_access_token, verify_password
from mediatree.models.library import Token

router = APIRouter()


@router.post("/token", response_model=Token)
async def login_for_access_token(
        # OAuth2PasswordRequestForm extracts "username" and "password" from the form.
        # Only the shared password matters.
        form_data: OAuth2PasswordRequestForm = Depends()
):
    """
    Exchange the shared access password for a bearer token.
    """
    if not verify_password(form_data.password):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect password",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return Token(access_token=create_access_token())
