"""
Routes API pour les audiences
Les routes sans paramètre sont déclarées avant /{audience_id}
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import datetime

from database import get_db
from auth import lecture, ecriture, admin_seulement
from constants import MAX_PAGE_SIZE
from enums import StatutAudience, TypeAudience
from models import User
from schemas import (
    AudienceCreate, AudienceUpdate, AudienceOut, AudienceStatistiques, StatutsRafraichis,
    ResultatAudienceCreate, ResultatAudienceUpdate, ResultatAudienceOut
)
from services.audience_service import audience_service

router = APIRouter(prefix="/api/contentieux/audiences", tags=["audiences"])


@router.post("", response_model=AudienceOut, status_code=201)
async def create_audience(
    audience: AudienceCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Crée une audience; la date de rappel d'enrôlement est calculée"""
    created = audience_service.creer(db, audience, user_id=current_user.id, request=request)
    return audience_service.obtenir(db, created.id)


@router.get("", response_model=List[AudienceOut])
async def list_audiences(
    statut: Optional[StatutAudience] = None,
    type: Optional[TypeAudience] = None,
    affaire_id: Optional[int] = None,
    date_debut: Optional[datetime] = None,
    date_fin: Optional[datetime] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return audience_service.lister(
        db, statut=statut, type=type, affaire_id=affaire_id,
        date_debut=date_debut, date_fin=date_fin, search=search,
        skip=skip, limit=limit
    )


@router.get("/statistics", response_model=AudienceStatistiques)
async def get_statistics(
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return audience_service.get_statistiques(db)


@router.get("/rappel-enrolement", response_model=List[AudienceOut])
async def get_rappels_enrolement(
    echus: bool = Query(False, description="Uniquement les rappels dont la date est atteinte"),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    """Audiences à enrôler: rappel demandé et enrôlement non effectué"""
    return audience_service.get_rappels_enrolement(db, echus_seulement=echus)


@router.post("/update-passed-statuses", response_model=StatutsRafraichis)
async def update_passed_statuses(
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    return audience_service.rafraichir_statuts(db)


@router.get("/{audience_id}", response_model=AudienceOut)
async def get_audience(
    audience_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return audience_service.obtenir(db, audience_id)


@router.patch("/{audience_id}", response_model=AudienceOut)
async def update_audience(
    audience_id: int,
    audience: AudienceUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    audience_service.modifier(db, audience_id, audience, user_id=current_user.id, request=request)
    return audience_service.obtenir(db, audience_id)


@router.delete("/{audience_id}")
async def delete_audience(
    audience_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    audience_service.supprimer(db, audience_id, user_id=current_user.id, request=request)
    return {"message": "Audience supprimée"}


@router.patch("/{audience_id}/enrolement", response_model=AudienceOut)
async def marquer_enrolement(
    audience_id: int,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    audience_service.marquer_enrolement_effectue(db, audience_id, user_id=current_user.id, request=request)
    return audience_service.obtenir(db, audience_id)


# ---------------------- RÉSULTAT ----------------------

@router.post("/{audience_id}/resultat", response_model=ResultatAudienceOut, status_code=201)
async def create_resultat(
    audience_id: int,
    resultat: ResultatAudienceCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Renseigne l'issue de l'audience (un seul résultat par audience)"""
    return audience_service.creer_resultat(db, audience_id, resultat, user_id=current_user.id, request=request)


@router.get("/{audience_id}/resultat", response_model=ResultatAudienceOut)
async def get_resultat(
    audience_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return audience_service.get_resultat(db, audience_id)


@router.patch("/{audience_id}/resultat", response_model=ResultatAudienceOut)
async def update_resultat(
    audience_id: int,
    resultat: ResultatAudienceUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return audience_service.update_resultat(db, audience_id, resultat, user_id=current_user.id, request=request)


@router.delete("/{audience_id}/resultat", response_model=AudienceOut)
async def delete_resultat(
    audience_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    """Supprime le résultat; le statut de l'audience est recalculé"""
    audience_service.delete_resultat(db, audience_id, user_id=current_user.id, request=request)
    return audience_service.obtenir(db, audience_id)
