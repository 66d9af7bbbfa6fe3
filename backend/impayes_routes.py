"""
Routes API pour le suivi des loyers impayés
"""
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import Optional
import logging

from database import get_db
from auth import lecture, ecriture
from error_handlers import BusinessRuleError
from models import User
from services.alerte_service import alerte_service
from services.impayes_service import impayes_service, mois_courant
from services.rent_calculator import parse_mois

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/immobilier/impayes", tags=["impayes"])


def _mois_valide(mois: Optional[str]) -> str:
    """Mois YYYY-MM demandé (mois courant par défaut), 400 s'il est invalide"""
    mois = mois or mois_courant()
    try:
        parse_mois(mois)
    except ValueError as e:
        raise BusinessRuleError(str(e), "INVALID_MONTH")
    return mois


@router.get("")
async def get_impayes(
    mois: Optional[str] = Query(None, description="Mois au format YYYY-MM"),
    immeuble_id: Optional[int] = None,
    locataire_id: Optional[int] = None,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    """Lots dont le loyer du mois n'est pas (entièrement) encaissé"""
    mois = _mois_valide(mois)
    lignes = impayes_service.detecter_impayes(db, mois, immeuble_id=immeuble_id, locataire_id=locataire_id)
    return [ligne.to_dict() for ligne in lignes]


@router.get("/statistiques")
async def get_statistiques_impayes(
    mois: Optional[str] = Query(None, description="Mois au format YYYY-MM"),
    immeuble_id: Optional[int] = None,
    current_user: User = Depends(lecture),
    db: Session = Depends(get_db)
):
    mois = _mois_valide(mois)
    return impayes_service.get_statistiques(db, mois=mois, immeuble_id=immeuble_id)


@router.post("/alertes")
async def generer_alertes(
    mois: Optional[str] = Query(None, description="Mois au format YYYY-MM"),
    current_user: User = Depends(ecriture),
    db: Session = Depends(get_db)
):
    """Génère une alerte LOYER_IMPAYE par lot impayé (sans doublon)"""
    mois = _mois_valide(mois)
    return alerte_service.generer_alertes_impayes(db, mois, user_id=current_user.id)
