# pokecatch/routers/auth.py
from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, EmailStr, Field, field_validator
from sqlalchemy.ext.asyncio import AsyncSession
from pokecatch.utils.database import get_db
from pokecatch.services.account_service import register_account, authenticate
from pokecatch.services.auth_service import create_access_token
from pokecatch.services.errors import AccountNotFound, BadCredentials, EmailTaken
import logging

router = APIRouter(tags=["auth"])

logger = logging.getLogger("pokecatch.auth")

# bcrypt only reads the first 72 bytes of its input
MAX_PASSWORD_BYTES = 72


# ---------------------- MODELS ----------------------
class SignupIn(BaseModel):
    email: EmailStr
    password: str = Field(min_length=1)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        if len(value.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes.")
        return value


class SigninIn(BaseModel):
    email: EmailStr
    password: str


# ---------------------- ROUTES ----------------------
@router.post("/signup")
async def signup(payload: SignupIn, db: AsyncSession = Depends(get_db)):
    logger.info(f"POST /signup received for email: {payload.email}")
    try:
        user = await register_account(db, payload.email, payload.password)
    except EmailTaken as e:
        # reported as a normal message, not an error status
        return {"message": e.message}

    logger.info(f"User registered successfully: {user.email}")
    return {"message": f"{user.email} created successfully"}


@router.post("/signin")
async def signin(payload: SigninIn, db: AsyncSession = Depends(get_db)):
    logger.info(f"POST /signin received for email: {payload.email}")
    try:
        user = await authenticate(db, payload.email, payload.password)
    except AccountNotFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=e.message)
    except BadCredentials as e:
        logger.warning(f"Failed signin for email: {payload.email}")
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=e.message)

    token = create_access_token(user.id)
    logger.info(f"User logged in successfully: {payload.email}")
    return {"message": "Login successful", "token": token}
