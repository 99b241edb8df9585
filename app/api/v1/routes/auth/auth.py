# app/routes/auth.py
import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.response import error_response, json_response
from app.core.security import (
    create_access_token,
    get_password_hash,
    verify_password,
    verify_token,
)
from app.db.deps import get_db
from app.models.user import User
from app.schemas.auth.auth_schema import (
    LoginRequest,
    RegisterResponse,
    Token,
    UserCreate,
    UserOut,
)

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/auth", tags=["auth"])
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


async def get_user_by_email(db: AsyncSession, email: str):
    q = await db.execute(select(User).where(User.email == email))
    return q.scalars().first()


async def authenticate_user(db: AsyncSession, email: str, password: str):
    user = await get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


async def get_current_user(
    token: str | None = Depends(oauth2_scheme),
    db: AsyncSession = Depends(get_db),
) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Unauthorized access. You must be logged in.",
        headers={"WWW-Authenticate": "Bearer"},
    )
    if not token:
        raise credentials_exception
    try:
        subject = verify_token(token)
        if subject is None:
            raise credentials_exception
        user_id = uuid.UUID(subject)
    except (JWTError, ValueError):
        raise credentials_exception

    user = await db.get(User, user_id)
    if user is None or not user.is_active:
        raise credentials_exception
    return user


# Register User
@router.post("/register", status_code=201, response_model=RegisterResponse)
async def register(user_in: UserCreate, db: AsyncSession = Depends(get_db)):
    if await get_user_by_email(db, user_in.email):
        return error_response("This email is already registered", status_code=400)

    user = User(
        email=user_in.email,
        password_hash=get_password_hash(user_in.password),
    )
    db.add(user)
    await db.commit()
    await db.refresh(user)
    logger.info(f"Registered user {user.id}")

    payload = RegisterResponse(
        user=UserOut.model_validate(user),
        access_token=create_access_token(str(user.id)),
    )
    return json_response(payload, status_code=201)


# User Login
@router.post("/login", response_model=Token)
async def login(creds: LoginRequest, db: AsyncSession = Depends(get_db)):
    user = await authenticate_user(db, creds.email, creds.password)
    if not user:
        return error_response("Incorrect email or password.", status_code=status.HTTP_401_UNAUTHORIZED)
    if not user.is_active:
        return error_response("Account is disabled.", status_code=status.HTTP_401_UNAUTHORIZED)

    return json_response(Token(access_token=create_access_token(str(user.id))))
