"""
Routes API pour les honoraires facturés sur les affaires
"""
from datetime import date
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import ecriture, admin_seulement
from constants import MAX_PAGE_SIZE
from models import User
from schemas import HonoraireCreate, HonoraireUpdate, HonoraireOut
from services.honoraire_service import honoraire_service

router = APIRouter(prefix="/api/contentieux/honoraires", tags=["honoraires"])


@router.get("", response_model=List[HonoraireOut])
async def list_honoraires(
    affaire_id: Optional[int] = None,
    date_debut: Optional[date] = None,
    date_fin: Optional[date] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Filtrables par affaire et par période de facturation"""
    return honoraire_service.lister(db, affaire_id=affaire_id, date_debut=date_debut, date_fin=date_fin,
                                    skip=skip, limit=limit)


@router.post("", response_model=HonoraireOut, status_code=201)
async def create_honoraire(
    honoraire: HonoraireCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return honoraire_service.creer(db, honoraire, user_id=current_user.id, request=request)


@router.get("/statistiques")
async def get_statistiques(
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return honoraire_service.get_statistiques(db)


@router.get("/affaire/{affaire_id}", response_model=List[HonoraireOut])
async def list_honoraires_affaire(
    affaire_id: int,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return honoraire_service.lister(db, affaire_id=affaire_id, limit=None)


@router.get("/{honoraire_id}", response_model=HonoraireOut)
async def get_honoraire(
    honoraire_id: int,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return honoraire_service.get_or_404(db, honoraire_id)


@router.patch("/{honoraire_id}", response_model=HonoraireOut)
async def update_honoraire(
    honoraire_id: int,
    honoraire: HonoraireUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return honoraire_service.modifier(db, honoraire_id, honoraire, user_id=current_user.id, request=request)


@router.delete("/{honoraire_id}")
async def delete_honoraire(
    honoraire_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    honoraire_service.delete(db, honoraire_id, user_id=current_user.id, request=request)
    return {"message": "Honoraire supprimé"}
