"""
Contrôleur pour l'authentification
Connexion par formulaire OAuth2 et profil de l'utilisateur courant
"""
from fastapi import APIRouter, Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session
import logging

from database import get_db
from auth import authenticate_user, create_access_token, get_current_user
from constants import get_error_message
from enums import ActionType, EntityType
from audit_logger import AuditLogger
import models
import schemas

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentification"])


@router.post("/login", response_model=schemas.Token)
async def login(
    request: Request,
    form_data: OAuth2PasswordRequestForm = Depends(),
    db: Session = Depends(get_db)
):
    """
    Connexion utilisateur (le champ username porte l'email)
    """
    user = authenticate_user(db, form_data.username, form_data.password)

    if not user:
        logger.warning("Échec de connexion pour %s", form_data.username)
        AuditLogger.log_error(
            db=db,
            description=f"Échec de connexion pour {form_data.username}",
            error_details=get_error_message("INVALID_CREDENTIALS"),
            request=request,
            status_code=401,
            entity_type=EntityType.USER
        )
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=get_error_message("INVALID_CREDENTIALS"),
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not user.actif:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=get_error_message("ACCOUNT_DISABLED")
        )

    access_token = create_access_token(data={"sub": user.email})

    AuditLogger.log_action(
        db=db,
        action=ActionType.LOGIN,
        entity_type=EntityType.USER,
        entity_id=user.id,
        user_id=user.id,
        description=f"Connexion de {user.email}",
        request=request,
        status_code=200
    )

    return {"access_token": access_token, "token_type": "bearer"}


@router.get("/me", response_model=schemas.UserOut)
async def read_me(current_user: models.User = Depends(get_current_user)):
    return current_user
