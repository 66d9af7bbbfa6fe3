"""
Alertes automatiques sur les loyers impayés
"""
import logging
from datetime import date
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from constants import SEUIL_PRIORITE_HAUTE_JOURS, SEUIL_PRIORITE_MOYENNE_JOURS
from enums import TypeAlerte, PrioriteAlerte
from models import Alerte
from services.impayes_service import ImpayesService, impayes_service
from services.rent_calculator import LigneImpaye

logger = logging.getLogger(__name__)


def priorite_pour_retard(jours_retard: int) -> PrioriteAlerte:
    if jours_retard >= SEUIL_PRIORITE_HAUTE_JOURS:
        return PrioriteAlerte.HAUTE
    if jours_retard >= SEUIL_PRIORITE_MOYENNE_JOURS:
        return PrioriteAlerte.MOYENNE
    return PrioriteAlerte.BASSE


def lien_lot(lot_id: int) -> str:
    return f"/immobilier/lots/{lot_id}"


class AlerteService:

    def __init__(self, impayes: ImpayesService = impayes_service):
        self.impayes = impayes

    def _alerte_existante(self, db: Session, lot_id: int, mois: str) -> bool:
        return db.query(Alerte.id).filter(
            Alerte.type == TypeAlerte.LOYER_IMPAYE,
            Alerte.lien == lien_lot(lot_id),
            Alerte.mois == mois
        ).first() is not None

    def generer_alerte_impaye(self, db: Session, ligne: LigneImpaye, user_id: Optional[int] = None) -> Optional[Alerte]:
        """
        Crée l'alerte d'un impayé, sauf si une alerte existe déjà pour ce lot et ce mois
        """
        if self._alerte_existante(db, ligne.lotId, ligne.moisConcerne):
            logger.debug("Alerte déjà existante pour le lot %s et le mois %s", ligne.lotId, ligne.moisConcerne)
            return None

        alerte = Alerte(
            type=TypeAlerte.LOYER_IMPAYE,
            titre=f"Loyer impayé - {ligne.immeubleNom} - Lot {ligne.lotNumero}",
            description=(
                f"Le locataire {ligne.locataireNom} a un impayé de {ligne.montantManquant:,.2f} "
                f"pour le mois {ligne.moisConcerne}. Retard: {ligne.joursRetard} jours."
            ),
            lien=lien_lot(ligne.lotId),
            mois=ligne.moisConcerne,
            priorite=priorite_pour_retard(ligne.joursRetard),
            lu=False,
            user_id=user_id
        )
        db.add(alerte)
        db.commit()
        db.refresh(alerte)
        logger.info("Alerte LOYER_IMPAYE créée: %s (%s)", alerte.titre, alerte.priorite.value)
        return alerte

    def generer_alertes_impayes(self, db: Session, mois: str, user_id: Optional[int] = None,
                                aujourd_hui: Optional[date] = None) -> dict:
        """
        Une alerte par lot impayé du mois; l'échec d'une alerte n'interrompt pas les autres
        """
        lignes = self.impayes.detecter_impayes(db, mois, aujourd_hui=aujourd_hui)

        creees = 0
        ignorees = 0
        echecs = 0
        for ligne in lignes:
            try:
                if self.generer_alerte_impaye(db, ligne, user_id):
                    creees += 1
                else:
                    ignorees += 1
            except SQLAlchemyError as e:
                db.rollback()
                echecs += 1
                logger.error("Échec de création de l'alerte pour le lot %s: %s", ligne.lotId, e)

        logger.info("%s alertes LOYER_IMPAYE générées pour %s (%s existantes, %s échecs)",
                    creees, mois, ignorees, echecs)
        return {"mois": mois, "impayes": len(lignes), "alertesCreees": creees,
                "alertesExistantes": ignorees, "echecs": echecs}

    def supprimer_alertes_resolues(self, db: Session, lot_id: int, mois: str) -> int:
        """Supprime les alertes d'un lot dont l'impayé du mois est soldé"""
        supprimees = db.query(Alerte).filter(
            Alerte.type == TypeAlerte.LOYER_IMPAYE,
            Alerte.lien == lien_lot(lot_id),
            Alerte.mois == mois
        ).delete(synchronize_session=False)
        db.commit()
        if supprimees:
            logger.info("%s alerte(s) résolue(s) supprimée(s) pour le lot %s (%s)", supprimees, lot_id, mois)
        return supprimees

    def lister(self, db: Session, non_lues: bool = False, skip: int = 0, limit: int = 100):
        query = db.query(Alerte)
        if non_lues:
            query = query.filter(Alerte.lu.is_(False))
        return query.order_by(Alerte.created_at.desc()).offset(skip).limit(limit).all()


alerte_service = AlerteService()
