from typing import Optional
from sqlalchemy.orm import Session
from socialhub.db import models

def get_user(db: Session, user_id: int) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.id == user_id).first()

def get_user_by_email(db: Session, email: str) -> Optional[models.User]:
    return db.query(models.User).filter(models.User.email == email.lower()).first()

def create_user(db: Session, email: str, password_hash: str, name: Optional[str] = None) -> models.User:
    obj = models.User(email=email.lower(), name=name, password_hash=password_hash)
    db.add(obj)
    db.commit()
    db.refresh(obj)
    return obj
