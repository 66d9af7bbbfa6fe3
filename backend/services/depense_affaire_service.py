"""
Service des dépenses engagées sur les affaires (huissier, greffe, timbres...)
"""
import datetime
import logging
from decimal import Decimal
from typing import Optional, List

from fastapi import Request
from sqlalchemy.orm import Session, selectinload

from base_crud import BaseCRUDService
from enums import EntityType, TypeDepenseAffaire
from models import DepenseAffaire
from services.honoraire_service import verifier_affaire
import schemas

logger = logging.getLogger(__name__)


def _par_type(depenses) -> List[dict]:
    totaux = {}
    for depense in depenses:
        ligne = totaux.setdefault(depense.type_depense.value, {"montant": Decimal("0"), "nombre": 0})
        ligne["montant"] += Decimal(depense.montant)
        ligne["nombre"] += 1
    return [
        {"type": type_depense, "montant": float(ligne["montant"]), "nombre": ligne["nombre"]}
        for type_depense, ligne in sorted(totaux.items())
    ]


class DepenseAffaireService(BaseCRUDService[DepenseAffaire, schemas.DepenseAffaireCreate,
                                            schemas.DepenseAffaireUpdate]):

    def __init__(self):
        super().__init__(DepenseAffaire, EntityType.DEPENSE_AFFAIRE, "Dépense d'affaire")

    def creer(self, db: Session, data: schemas.DepenseAffaireCreate, user_id: int = None,
              request: Request = None) -> DepenseAffaire:
        affaire = verifier_affaire(db, data.affaire_id)
        depense = self.create(db, data, user_id=user_id, request=request, created_by=user_id)
        logger.info("Dépense %s de %s sur l'affaire %s", data.type_depense.value, data.montant, affaire.reference)
        return depense

    def lister(self, db: Session, affaire_id: Optional[int] = None,
               type_depense: Optional[TypeDepenseAffaire] = None,
               date_debut: Optional[datetime.date] = None, date_fin: Optional[datetime.date] = None,
               montant_min: Optional[Decimal] = None, montant_max: Optional[Decimal] = None,
               skip: int = 0, limit: int = 100) -> List[DepenseAffaire]:
        query = db.query(DepenseAffaire).options(selectinload(DepenseAffaire.affaire))
        if affaire_id:
            query = query.filter(DepenseAffaire.affaire_id == affaire_id)
        if type_depense:
            query = query.filter(DepenseAffaire.type_depense == type_depense)
        if date_debut:
            query = query.filter(DepenseAffaire.date >= date_debut)
        if date_fin:
            query = query.filter(DepenseAffaire.date <= date_fin)
        if montant_min is not None:
            query = query.filter(DepenseAffaire.montant >= montant_min)
        if montant_max is not None:
            query = query.filter(DepenseAffaire.montant <= montant_max)
        return query.order_by(DepenseAffaire.date.desc()).offset(skip).limit(limit).all()

    def modifier(self, db: Session, depense_id: int, data: schemas.DepenseAffaireUpdate,
                 user_id: int = None, request: Request = None) -> DepenseAffaire:
        depense = self.get_or_404(db, depense_id)
        return self.update(db, depense, data, user_id=user_id, request=request)

    def get_statistiques(self, db: Session) -> dict:
        depenses = db.query(DepenseAffaire).all()
        return {
            "totalMontant": float(sum((Decimal(d.montant) for d in depenses), Decimal("0"))),
            "nombreDepenses": len(depenses),
            "parType": _par_type(depenses),
        }

    def get_rapport_periode(self, db: Session, date_debut: datetime.date, date_fin: datetime.date) -> dict:
        depenses = (
            db.query(DepenseAffaire)
            .options(selectinload(DepenseAffaire.affaire))
            .filter(DepenseAffaire.date >= date_debut, DepenseAffaire.date <= date_fin)
            .order_by(DepenseAffaire.date.desc())
            .all()
        )
        return {
            "periode": {"dateDebut": date_debut.isoformat(), "dateFin": date_fin.isoformat()},
            "totalMontant": float(sum((Decimal(d.montant) for d in depenses), Decimal("0"))),
            "nombreDepenses": len(depenses),
            "parType": _par_type(depenses),
            "depenses": [schemas.DepenseAffaireOut.model_validate(d).model_dump(mode="json") for d in depenses],
        }


depense_affaire_service = DepenseAffaireService()
