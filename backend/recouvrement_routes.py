"""
Routes API pour les dossiers de recouvrement
"""
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from auth import lecture, ecriture, admin_seulement
from constants import MAX_PAGE_SIZE
from enums import StatutRecouvrement
from models import User
from schemas import (
    DossierRecouvrementCreate, DossierRecouvrementUpdate, DossierRecouvrementOut,
    PaiementCreate, PaiementOut, ActionCreate, ActionUpdate, ActionOut
)
from services.recouvrement_service import recouvrement_service

router = APIRouter(prefix="/api/recouvrement", tags=["recouvrement"])


@router.get("/dossiers", response_model=List[DossierRecouvrementOut])
async def list_dossiers(
    statut: Optional[StatutRecouvrement] = None,
    search: Optional[str] = None,
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.lister(db, statut=statut, search=search, skip=skip, limit=limit)


@router.post("/dossiers", response_model=DossierRecouvrementOut, status_code=201)
async def create_dossier(
    dossier: DossierRecouvrementCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Le total à recouvrer est calculé (principal + pénalités et intérêts)"""
    return recouvrement_service.creer(db, dossier, user_id=current_user.id, request=request)


@router.get("/dossiers/statistiques")
async def get_statistiques(
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.get_statistiques(db)


@router.get("/dossiers/{dossier_id}", response_model=DossierRecouvrementOut)
async def get_dossier(
    dossier_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.get_or_404(db, dossier_id)


@router.patch("/dossiers/{dossier_id}", response_model=DossierRecouvrementOut)
async def update_dossier(
    dossier_id: int,
    dossier: DossierRecouvrementUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.modifier(db, dossier_id, dossier, user_id=current_user.id, request=request)


@router.delete("/dossiers/{dossier_id}")
async def delete_dossier(
    dossier_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    recouvrement_service.delete(db, dossier_id, user_id=current_user.id, request=request)
    return {"message": "Dossier supprimé"}


# ---------------------- PAIEMENTS ----------------------

@router.get("/dossiers/{dossier_id}/paiements", response_model=List[PaiementOut])
async def list_paiements(
    dossier_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.lister_paiements(db, dossier_id)


@router.post("/dossiers/{dossier_id}/paiements", response_model=PaiementOut, status_code=201)
async def create_paiement(
    dossier_id: int,
    paiement: PaiementCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Un paiement supérieur au solde restant est refusé (400)"""
    return recouvrement_service.ajouter_paiement(db, dossier_id, paiement, user_id=current_user.id, request=request)


@router.delete("/paiements/{paiement_id}")
async def delete_paiement(
    paiement_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    recouvrement_service.supprimer_paiement(db, paiement_id, user_id=current_user.id, request=request)
    return {"message": "Paiement supprimé"}


# ---------------------- ACTIONS ----------------------

@router.get("/actions", response_model=List[ActionOut])
async def list_actions(
    skip: int = Query(0, ge=0),
    limit: int = Query(MAX_PAGE_SIZE, ge=1, le=MAX_PAGE_SIZE),
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.lister_actions(db, skip=skip, limit=limit)


@router.get("/dossiers/{dossier_id}/actions", response_model=List[ActionOut])
async def list_actions_dossier(
    dossier_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    """Historique des actions du dossier, de la plus récente à la plus ancienne"""
    return recouvrement_service.lister_actions(db, dossier_id=dossier_id, limit=None)


@router.post("/dossiers/{dossier_id}/actions", response_model=ActionOut, status_code=201)
async def create_action(
    dossier_id: int,
    action: ActionCreate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.ajouter_action(db, dossier_id, action, user_id=current_user.id, request=request)


@router.get("/actions/{action_id}", response_model=ActionOut)
async def get_action(
    action_id: int,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.get_action(db, action_id)


@router.patch("/actions/{action_id}", response_model=ActionOut)
async def update_action(
    action_id: int,
    action: ActionUpdate,
    request: Request,
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    return recouvrement_service.modifier_action(db, action_id, action, user_id=current_user.id, request=request)


@router.delete("/actions/{action_id}")
async def delete_action(
    action_id: int,
    request: Request,
    current_user: User = Depends(admin_seulement),
    db: Session = Depends(get_db)
):
    recouvrement_service.supprimer_action(db, action_id, user_id=current_user.id, request=request)
    return {"message": "Action supprimée"}
