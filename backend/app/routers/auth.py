import logging
from datetime import datetime, timedelta, timezone

from fastapi import APIRouter, Depends, Header, HTTPException
from jose import jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import settings
from app.database import get_db
from app.dependencies import get_current_user, require_admin
from app.models.user import User
from app.schemas.auth import AuthResponse, LoginRequest, PasswordChangeRequest, UserResponse
from app.services.booking_wizard import Identity, wizard_registry

logger = logging.getLogger(__name__)

router = APIRouter()
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def create_access_token(user_id: int) -> str:
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.access_token_expire_minutes)
    payload = {"sub": str(user_id), "exp": expire}
    return jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)


@router.post("/login", response_model=AuthResponse)
async def login(
    req: LoginRequest,
    db: AsyncSession = Depends(get_db),
    x_client_id: str | None = Header(default=None),
):
    result = await db.execute(select(User).where(User.username == req.username))
    user = result.scalar_one_or_none()

    if not user or not pwd_context.verify(req.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid credentials")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account is disabled")

    if x_client_id:
        wizard_registry.identity_changed(x_client_id, Identity(id=user.id, role=user.role))

    logger.info(f"User {user.username} logged in")
    token = create_access_token(user.id)
    return AuthResponse(token=token, user=UserResponse.model_validate(user))


@router.post("/logout")
async def logout(
    user: User = Depends(get_current_user),
    x_client_id: str | None = Header(default=None),
):
    """Tokens are stateless; the client discards its token.

    The device's wizard is cleared only when the caller is the user signed in on it.
    """
    if x_client_id:
        signed_in = wizard_registry.identity_of(x_client_id)
        if signed_in is not None and signed_in.id == user.id:
            wizard_registry.identity_changed(x_client_id, None)
        elif signed_in is not None:
            logger.warning(f"Ignoring logout for device {x_client_id} from user {user.id}")
    return {"message": "Logged out successfully"}


@router.get("/session", response_model=UserResponse)
async def get_session(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)


@router.put("/password")
async def change_password(
    req: PasswordChangeRequest,
    db: AsyncSession = Depends(get_db),
    user: User = Depends(require_admin),
):
    user.password_hash = pwd_context.hash(req.new_password)
    await db.commit()
    logger.info(f"Password updated for {user.username}")
    return {"message": "Password updated successfully"}
