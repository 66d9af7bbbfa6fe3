"""
Routes API pour les arriérés de loyers et leurs paiements partiels
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import lecture, ecriture
from constants import MAX_PAGE_SIZE
from enums import StatutArrierage
from models import User
from schemas import ArrierageCreate, ArrierageUpdate, ArrierageOut, PaiementPartielCreate
from services.arrierage_service import arrierage_service

router = APIRouter(prefix="/api/immobilier/arrierages", tags=["arrierages"])


@router.get("", response_model=List[ArrierageOut])
async def list_arrierages(
    immeuble_id: Optional[int] = None,
    locataire_id: Optional[int] = None,
    lot_id: Optional[int] = None,
    statut: Optional[StatutArrierage] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return arrierage_service.lister(
        db, immeuble_id=immeuble_id, locataire_id=locataire_id, lot_id=lot_id, statut=statut,
        skip=skip, limit=limit
    )


@router.post("", response_model=ArrierageOut, status_code=201)
async def create_arrierage(
    arrierage: ArrierageCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Une période qui chevauche un arriéré existant du même lot est refusée (400)"""
    return arrierage_service.creer(db, arrierage, user_id=current_user.id, request=request)


@router.get("/statistics")
async def get_statistiques(
    immeuble_id: Optional[int] = None,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return arrierage_service.get_statistiques(db, immeuble_id=immeuble_id)


@router.get("/statistics/taux-recouvrement")
async def get_taux_recouvrement(
    immeuble_id: Optional[int] = None,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    stats = arrierage_service.get_statistiques(db, immeuble_id=immeuble_id)
    return {"tauxRecouvrement": stats["tauxRecouvrement"]}


@router.get("/statistics/repartition-locataires")
async def get_repartition_locataires(
    immeuble_id: Optional[int] = None,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return arrierage_service.get_repartition_par_locataire(db, immeuble_id=immeuble_id)


@router.get("/{arrierage_id}", response_model=ArrierageOut)
async def get_arrierage(
    arrierage_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return arrierage_service.get_or_404(db, arrierage_id)


@router.patch("/{arrierage_id}", response_model=ArrierageOut)
async def update_arrierage(
    arrierage_id: int,
    arrierage: ArrierageUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return arrierage_service.modifier(db, arrierage_id, arrierage, user_id=current_user.id, request=request)


@router.delete("/{arrierage_id}")
async def delete_arrierage(
    arrierage_id: int,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    arrierage_service.delete(db, arrierage_id, user_id=current_user.id, request=request)
    return {"message": "Arriéré supprimé"}


@router.post("/{arrierage_id}/paiements", response_model=ArrierageOut, status_code=201)
async def create_paiement_partiel(
    arrierage_id: int,
    paiement: PaiementPartielCreate,
    request: Request,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    """Renvoie l'arriéré mis à jour; un paiement sur un arriéré soldé ou au-delà du restant est refusé"""
    return arrierage_service.enregistrer_paiement(db, arrierage_id, paiement, user_id=current_user.id,
                                                  request=request)
