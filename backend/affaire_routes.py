"""
Routes API pour les affaires (contentieux)
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy import or_
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import lecture, ecriture, admin_seulement
from base_crud import BaseCRUDService, generer_reference
from constants import MAX_PAGE_SIZE
from enums import EntityType, StatutAffaire
from models import User, Affaire
from schemas import AffaireCreate, AffaireUpdate, AffaireOut

router = APIRouter(prefix="/api/contentieux/affaires", tags=["affaires"])

affaire_service = BaseCRUDService(Affaire, EntityType.AFFAIRE, "Affaire")


@router.get("", response_model=List[AffaireOut])
async def list_affaires(
    statut: Optional[StatutAffaire] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    """Liste les affaires, filtrables par statut et recherche texte"""
    query = db.query(Affaire)
    if statut:
        query = query.filter(Affaire.statut == statut)
    if search:
        motif = f"%{search}%"
        query = query.filter(or_(
            Affaire.reference.ilike(motif),
            Affaire.intitule.ilike(motif),
            Affaire.juridiction.ilike(motif),
        ))
    return query.order_by(Affaire.created_at.desc()).offset(skip).limit(limit).all()


@router.post("", response_model=AffaireOut, status_code=201)
async def create_affaire(
    affaire: AffaireCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    reference = affaire.reference or generer_reference(db, Affaire, "AFF")
    return affaire_service.create(
        db, affaire, user_id=current_user.id, request=request,
        reference=reference, created_by=current_user.id
    )


@router.get("/{affaire_id}", response_model=AffaireOut)
async def get_affaire(
    affaire_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return affaire_service.get_or_404(db, affaire_id)


@router.patch("/{affaire_id}", response_model=AffaireOut)
async def update_affaire(
    affaire_id: int,
    affaire: AffaireUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    db_affaire = affaire_service.get_or_404(db, affaire_id)
    return affaire_service.update(db, db_affaire, affaire, user_id=current_user.id, request=request)


@router.delete("/{affaire_id}")
async def delete_affaire(
    affaire_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    """Supprime une affaire et ses audiences"""
    affaire_service.delete(db, affaire_id, user_id=current_user.id, request=request)
    return {"message": "Affaire supprimée"}
