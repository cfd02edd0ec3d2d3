"""Authentication endpoints."""

from fastapi import APIRouter, Depends, HTTPException, status

from newsbrief.api.deps import get_account_service, get_app_settings, get_current_account
from newsbrief.config import Settings
from newsbrief.models import Account
from newsbrief.schemas.account import (
    AccountResponse,
    LoginRequest,
    RegisterRequest,
    TokenResponse,
)
from newsbrief.services.auth_service import (
    AccountService,
    EmailAlreadyRegisteredError,
    InvalidCredentialsError,
)

router = APIRouter()


@router.post("/register", response_model=AccountResponse, status_code=status.HTTP_201_CREATED)
async def register(
    body: RegisterRequest,
    accounts: AccountService = Depends(get_account_service),
) -> AccountResponse:
    """Create an account."""
    try:
        account = await accounts.register(
            username=body.username,
            email=body.email,
            password=body.password,
            country=body.country,
        )
    except EmailAlreadyRegisteredError:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Email is already registered",
        )
    return AccountResponse.model_validate(account)


@router.post("/login", response_model=TokenResponse)
async def login(
    body: LoginRequest,
    accounts: AccountService = Depends(get_account_service),
    settings: Settings = Depends(get_app_settings),
) -> TokenResponse:
    """Exchange credentials for a session token valid for one hour."""
    try:
        account, token = await accounts.login(body.email, body.password)
    except InvalidCredentialsError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid email or password",
        )
    return TokenResponse(
        access_token=token,
        expires_in=settings.token_ttl_seconds,
        account=AccountResponse.model_validate(account),
    )


@router.get("/me", response_model=AccountResponse)
async def me(account: Account = Depends(get_current_account)) -> AccountResponse:
    """Return the account behind the bearer token."""
    return AccountResponse.model_validate(account)
