"""
Authentication endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from ems.core.deps import get_db, get_current_user
from ems.core.security import create_access_token
from ems.models.user_account import UserAccount
from ems.schemas.auth import LoginRequest, TokenResponse, AccountOut
from ems.services.account_service import authenticate

router = APIRouter()


@router.post("/login", response_model=TokenResponse)
async def login(
    login_data: LoginRequest,
    db: Session = Depends(get_db)
):
    """
    Authenticate an account and return a JWT token

    Rejects unknown logins, wrong passwords and inactive accounts.
    """
    account = authenticate(db, login_data.email, login_data.password)
    if account is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password"
        )

    if not account.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive"
        )

    # JWT 'sub' claim must be a string
    token_data = {
        "sub": str(account.id),
        "employee_id": account.employee_id,
        "role": account.role,
    }
    access_token = create_access_token(data=token_data)
    return TokenResponse(access_token=access_token, token_type="bearer")


@router.get("/me", response_model=AccountOut)
async def get_me(current_user: UserAccount = Depends(get_current_user)):
    """Current account"""
    return current_user
