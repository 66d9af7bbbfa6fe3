"""
Service des honoraires facturés sur les affaires
"""
import datetime
import logging
from decimal import Decimal
from typing import Optional, List

from fastapi import Request
from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from base_crud import BaseCRUDService
from constants import get_error_message
from enums import EntityType
from error_handlers import NotFoundError, BusinessRuleError
from models import Affaire, HonoraireAffaire
import schemas

logger = logging.getLogger(__name__)


def verifier_affaire(db: Session, affaire_id: int) -> Affaire:
    affaire = db.query(Affaire).filter(Affaire.id == affaire_id).first()
    if affaire is None:
        raise NotFoundError("Affaire", affaire_id)
    return affaire


class HonoraireService(BaseCRUDService[HonoraireAffaire, schemas.HonoraireCreate, schemas.HonoraireUpdate]):

    def __init__(self):
        super().__init__(HonoraireAffaire, EntityType.HONORAIRE, "Honoraire")

    def creer(self, db: Session, data: schemas.HonoraireCreate, user_id: int = None,
              request: Request = None) -> HonoraireAffaire:
        affaire = verifier_affaire(db, data.affaire_id)
        honoraire = self.create(db, data, user_id=user_id, request=request, created_by=user_id)
        logger.info("Honoraire de %s facturé sur l'affaire %s", data.montant_facture, affaire.reference)
        return honoraire

    def lister(self, db: Session, affaire_id: Optional[int] = None,
               date_debut: Optional[datetime.date] = None, date_fin: Optional[datetime.date] = None,
               skip: int = 0, limit: int = 100) -> List[HonoraireAffaire]:
        query = db.query(HonoraireAffaire).options(selectinload(HonoraireAffaire.affaire))
        if affaire_id:
            query = query.filter(HonoraireAffaire.affaire_id == affaire_id)
        if date_debut:
            query = query.filter(HonoraireAffaire.date_facturation >= date_debut)
        if date_fin:
            query = query.filter(HonoraireAffaire.date_facturation <= date_fin)
        return query.order_by(HonoraireAffaire.date_facturation.desc()).offset(skip).limit(limit).all()

    def modifier(self, db: Session, honoraire_id: int, data: schemas.HonoraireUpdate,
                 user_id: int = None, request: Request = None) -> HonoraireAffaire:
        honoraire = self.get_or_404(db, honoraire_id)
        valeurs = data.model_dump(exclude_unset=True)

        facture = valeurs.get("montant_facture", honoraire.montant_facture)
        encaisse = valeurs.get("montant_encaisse", honoraire.montant_encaisse)
        if Decimal(encaisse) > Decimal(facture):
            raise BusinessRuleError(
                get_error_message("ENCAISSEMENT_SUPERIEUR_FACTURE"), "ENCAISSEMENT_SUPERIEUR_FACTURE"
            )

        return self.update(db, honoraire, valeurs, user_id=user_id, request=request)

    def get_statistiques(self, db: Session) -> dict:
        nombre, facture, encaisse = db.query(
            func.count(HonoraireAffaire.id),
            func.coalesce(func.sum(HonoraireAffaire.montant_facture), 0),
            func.coalesce(func.sum(HonoraireAffaire.montant_encaisse), 0),
        ).one()
        facture, encaisse = Decimal(str(facture)), Decimal(str(encaisse))
        return {
            "totalFacture": float(facture),
            "totalEncaisse": float(encaisse),
            "totalRestant": float(facture - encaisse),
            "nombreHonoraires": nombre,
        }


honoraire_service = HonoraireService()
