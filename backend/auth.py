from datetime import datetime, timedelta
from jose import JWTError, jwt
import bcrypt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session
from database import get_db
from constants import JWT_ALGORITHM, DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES, get_error_message
from enums import AppRole
from error_handlers import PermissionDeniedError
import models
import os
import secrets
import logging

logger = logging.getLogger(__name__)

# Utilise une variable d'environnement pour la clé secrète
# Si pas définie, génère une clé aléatoire (pour dev seulement)
SECRET_KEY = os.getenv("JWT_SECRET_KEY")
if not SECRET_KEY:
    SECRET_KEY = secrets.token_urlsafe(32)
    logger.warning("JWT_SECRET_KEY non définie, utilisation d'une clé temporaire (dev uniquement)")

ALGORITHM = JWT_ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login")

# Rôles par type d'opération
ROLES_LECTURE = (AppRole.admin, AppRole.collaborateur, AppRole.compta)
ROLES_ECRITURE = (AppRole.admin, AppRole.collaborateur)
ROLES_ADMIN = (AppRole.admin,)


def get_password_hash(password):
    """Hash un mot de passe avec bcrypt"""
    password_bytes = password.encode('utf-8')
    salt = bcrypt.gensalt()
    hashed = bcrypt.hashpw(password_bytes, salt)
    return hashed.decode('utf-8')


def verify_password(plain_password, hashed_password):
    """Vérifie un mot de passe contre son hash bcrypt"""
    try:
        password_bytes = plain_password.encode('utf-8')
        hashed_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(password_bytes, hashed_bytes)
    except ValueError:
        # Hash mal formé en base
        return False


def create_access_token(data: dict, expires_delta: timedelta | None = None):
    to_encode = data.copy()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)


def get_user_by_email(db: Session, email: str):
    return db.query(models.User).filter(models.User.email == email).first()


def authenticate_user(db: Session, email: str, password: str):
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user


def get_current_user(token: str = Depends(oauth2_scheme), db: Session = Depends(get_db)):
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=get_error_message("TOKEN_INVALID"),
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        email: str = payload.get("sub")
        if email is None:
            raise credentials_exception
    except JWTError:
        raise credentials_exception

    user = get_user_by_email(db, email)
    if user is None:
        raise credentials_exception

    if not user.actif:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=get_error_message("ACCOUNT_DISABLED")
        )

    return user


def require_roles(*roles):
    """
    Dépendance FastAPI: l'utilisateur doit posséder au moins un des rôles donnés
    """
    attendus = {r.value if isinstance(r, AppRole) else r for r in roles}

    def checker(current_user: models.User = Depends(get_current_user)):
        if not attendus & current_user.role_names:
            logger.warning(
                "Accès refusé pour %s (rôles %s, requis %s)",
                current_user.email, sorted(current_user.role_names), sorted(attendus)
            )
            raise PermissionDeniedError(get_error_message("INSUFFICIENT_PERMISSIONS"))
        return current_user

    return checker


# Raccourcis utilisés par les routes
lecture = require_roles(*ROLES_LECTURE)
ecriture = require_roles(*ROLES_ECRITURE)
admin_seulement = require_roles(*ROLES_ADMIN)
