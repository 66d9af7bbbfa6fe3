"""
Routes API pour les dépenses engagées sur les affaires
"""
from datetime import date
from decimal import Decimal
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import ecriture, admin_seulement
from constants import MAX_PAGE_SIZE, get_error_message
from enums import TypeDepenseAffaire
from error_handlers import BusinessRuleError
from models import User
from schemas import DepenseAffaireCreate, DepenseAffaireUpdate, DepenseAffaireOut
from services.depense_affaire_service import depense_affaire_service

router = APIRouter(prefix="/api/contentieux/depenses", tags=["depenses-affaires"])


@router.get("", response_model=List[DepenseAffaireOut])
async def list_depenses(
    affaire_id: Optional[int] = None,
    type_depense: Optional[TypeDepenseAffaire] = None,
    date_debut: Optional[date] = None,
    date_fin: Optional[date] = None,
    montant_min: Optional[Decimal] = Query(None, ge=0),
    montant_max: Optional[Decimal] = Query(None, ge=0),
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.lister(
        db, affaire_id=affaire_id, type_depense=type_depense, date_debut=date_debut, date_fin=date_fin,
        montant_min=montant_min, montant_max=montant_max, skip=skip, limit=limit
    )


@router.post("", response_model=DepenseAffaireOut, status_code=201)
async def create_depense(
    depense: DepenseAffaireCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.creer(db, depense, user_id=current_user.id, request=request)


@router.get("/statistiques")
async def get_statistiques(
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.get_statistiques(db)


@router.get("/rapport-periode")
async def get_rapport_periode(
    date_debut: date,
    date_fin: date,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Dépenses de la période (bornes incluses), totalisées par type"""
    if date_debut > date_fin:
        raise BusinessRuleError(get_error_message("PERIODE_INVALIDE"), "PERIODE_INVALIDE")
    return depense_affaire_service.get_rapport_periode(db, date_debut, date_fin)


@router.get("/affaire/{affaire_id}", response_model=List[DepenseAffaireOut])
async def list_depenses_affaire(
    affaire_id: int,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.lister(db, affaire_id=affaire_id, limit=None)


@router.get("/type/{type_depense}", response_model=List[DepenseAffaireOut])
async def list_depenses_type(
    type_depense: TypeDepenseAffaire,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.lister(db, type_depense=type_depense, limit=None)


@router.get("/{depense_id}", response_model=DepenseAffaireOut)
async def get_depense(
    depense_id: int,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.get_or_404(db, depense_id)


@router.patch("/{depense_id}", response_model=DepenseAffaireOut)
async def update_depense(
    depense_id: int,
    depense: DepenseAffaireUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return depense_affaire_service.modifier(db, depense_id, depense, user_id=current_user.id, request=request)


@router.delete("/{depense_id}")
async def delete_depense(
    depense_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    depense_affaire_service.delete(db, depense_id, user_id=current_user.id, request=request)
    return {"message": "Dépense supprimée"}
