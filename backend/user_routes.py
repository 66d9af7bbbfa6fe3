"""
Routes API d'administration des utilisateurs et de leurs rôles
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import get_current_user, admin_seulement
from constants import MAX_PAGE_SIZE
from enums import AppRole
from error_handlers import PermissionDeniedError
from models import User
from schemas import UserCreate, UserUpdate, UserDetailOut, RoleAssign
from services.user_service import user_service

router = APIRouter(prefix="/api/users", tags=["utilisateurs"])


def _soi_ou_admin(current_user: User, user_id: int):
    """Un utilisateur consulte son propre profil; les autres profils sont réservés aux admins"""
    if current_user.id != user_id and AppRole.admin.value not in current_user.role_names:
        raise PermissionDeniedError()


@router.get("", response_model=List[UserDetailOut])
async def list_users(
    role: Optional[AppRole] = None,
    actif: Optional[bool] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    return user_service.lister(db, role=role, actif=actif, skip=skip, limit=limit)


@router.post("", response_model=UserDetailOut, status_code=201)
async def create_user(
    user: UserCreate,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    """Email unique (409), mot de passe d'au moins 8 caractères avec majuscule, minuscule et chiffre"""
    return user_service.creer(db, user, user_id=current_user.id, request=request)


@router.get("/{user_id}", response_model=UserDetailOut)
async def get_user(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _soi_ou_admin(current_user, user_id)
    return user_service.get_or_404(db, user_id)


@router.patch("/{user_id}", response_model=UserDetailOut)
async def update_user(
    user_id: int,
    user: UserUpdate,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    return user_service.modifier(db, user_id, user, user_id=current_user.id, request=request)


@router.delete("/{user_id}")
async def delete_user(
    user_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    user_service.supprimer(db, user_id, user_id=current_user.id, request=request)
    return {"message": "Utilisateur supprimé"}


# ---------------------- RÔLES ----------------------

@router.get("/{user_id}/roles", response_model=List[str])
async def get_user_roles(
    user_id: int,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    _soi_ou_admin(current_user, user_id)
    return sorted(user_service.get_or_404(db, user_id).role_names)


@router.post("/{user_id}/roles", response_model=UserDetailOut, status_code=201)
async def assign_role(
    user_id: int,
    attribution: RoleAssign,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    return user_service.attribuer_role(db, user_id, attribution.role, user_id=current_user.id, request=request)


@router.delete("/{user_id}/roles/{role}", response_model=UserDetailOut)
async def remove_role(
    user_id: int,
    role: AppRole,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    """Le dernier administrateur actif ne peut pas perdre son rôle admin (400)"""
    return user_service.retirer_role(db, user_id, role, user_id=current_user.id, request=request)
