# socialhub/routers/auth.py
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from socialhub.auth.security import create_access_token, hash_password, verify_password
from socialhub.db import crud_users
from socialhub.deps import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])

class RegisterIn(BaseModel):
    email: str = Field(..., min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    name: Optional[str] = Field(None, max_length=256)
    password: str = Field(..., min_length=8, max_length=72)

class LoginIn(BaseModel):
    email: str
    password: str

def _auth_response(user) -> Dict[str, Any]:
    return {
        "user": {"id": user.id, "email": user.email, "name": user.name},
        "token": create_access_token(user.id),
    }

@router.post("/register", status_code=201)
def register(body: RegisterIn, db: Session = Depends(get_db)) -> Dict[str, Any]:
    if len(body.password.encode("utf-8")) > 72:
        raise HTTPException(422, "Password must be at most 72 bytes")
    if crud_users.get_user_by_email(db, body.email):
        raise HTTPException(409, "Email already registered")
    user = crud_users.create_user(db, body.email, hash_password(body.password), name=body.name)
    logger.info("Registered user %s", user.id)
    return _auth_response(user)

@router.post("/login")
def login(body: LoginIn, db: Session = Depends(get_db)) -> Dict[str, Any]:
    user = crud_users.get_user_by_email(db, body.email)
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(401, "Invalid credentials")
    return _auth_response(user)
