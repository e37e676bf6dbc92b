from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from ledger.config import ALGORITHM, SECRET_KEY
from ledger.db import get_db
from ledger.models import Module, User, UserModuleAccess
from ledger.module_keys import MODULE_DEFINITIONS

# Tokens are issued by the surrounding ERP; this service only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")


def _has_module_access(db: Session, user: User, module_key: str) -> bool:
    return (
        db.query(UserModuleAccess.id)
        .join(Module, UserModuleAccess.module_id == Module.id)
        .filter(UserModuleAccess.user_id == user.id, Module.key == module_key)
        .first()
        is not None
    )


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)) -> User:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        user_id = int(payload["sub"])
    except (JWTError, KeyError, TypeError, ValueError):
        raise credentials_exception from None

    user = db.query(User).filter(User.id == user_id).first()
    if not user or not user.is_active:
        raise credentials_exception
    return user


def require_module(module_key: str):
    """Dependency factory: the current user, if an admin or granted ``module_key``."""

    def dependency(current_user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> User:
        if current_user.is_admin or _has_module_access(db, current_user, module_key):
            return current_user
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized for module '{module_key}'",
        )

    return dependency


def seed_modules(db: Session) -> None:
    existing = {row[0] for row in db.query(Module.key).all()}
    for module_key, name in MODULE_DEFINITIONS:
        if module_key.value not in existing:
            db.add(Module(key=module_key.value, name=name))
