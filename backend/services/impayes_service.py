"""
Service des impayés: charge baux et encaissements puis délègue aux calculs purs
"""
import logging
from datetime import date
from typing import Optional, List

from sqlalchemy.orm import Session, selectinload

from constants import POLITIQUE_BAIL_INACTIF, POLITIQUES_BAIL_INACTIF, NB_MOIS_EVOLUTION_IMPAYES
from models import Bail, Lot, EncaissementLoyer
from services import rent_calculator
from services.rent_calculator import LigneImpaye

logger = logging.getLogger(__name__)


def mois_courant(aujourd_hui: Optional[date] = None) -> str:
    aujourd_hui = aujourd_hui or date.today()
    return rent_calculator.format_mois(aujourd_hui.year, aujourd_hui.month)


class ImpayesService:
    """
    Détection des impayés et statistiques de loyers
    """

    def __init__(self, politique: str = POLITIQUE_BAIL_INACTIF):
        if politique not in POLITIQUES_BAIL_INACTIF:
            raise ValueError(f"Politique de bail inactif inconnue: {politique}")
        self.politique = politique

    def _charger_baux(self, db: Session, immeuble_id: Optional[int] = None,
                      locataire_id: Optional[int] = None) -> List[Bail]:
        query = db.query(Bail).options(
            selectinload(Bail.lot).selectinload(Lot.immeuble),
            selectinload(Bail.locataire)
        )
        if immeuble_id:
            query = query.join(Bail.lot).filter(Lot.immeuble_id == immeuble_id)
        if locataire_id:
            query = query.filter(Bail.locataire_id == locataire_id)
        return query.all()

    def _charger_encaissements(self, db: Session, lot_ids, mois_list) -> List[EncaissementLoyer]:
        if not lot_ids:
            return []
        return db.query(EncaissementLoyer).filter(
            EncaissementLoyer.lot_id.in_(lot_ids),
            EncaissementLoyer.mois_concerne.in_(mois_list)
        ).all()

    def detecter_impayes(self, db: Session, mois: str, immeuble_id: Optional[int] = None,
                         locataire_id: Optional[int] = None,
                         aujourd_hui: Optional[date] = None) -> List[LigneImpaye]:
        rent_calculator.parse_mois(mois)
        logger.info("Détection des impayés pour %s (immeuble=%s, locataire=%s)", mois, immeuble_id, locataire_id)

        baux = self._charger_baux(db, immeuble_id, locataire_id)
        encaissements = self._charger_encaissements(db, {b.lot_id for b in baux}, [mois])
        lignes = rent_calculator.detecter_impayes(baux, encaissements, mois, self.politique, aujourd_hui)

        logger.info("%s impayés détectés pour %s", len(lignes), mois)
        return lignes

    def est_lot_solde(self, db: Session, lot_id: int, mois: str) -> bool:
        """Vrai si le loyer attendu du lot pour le mois est entièrement encaissé"""
        baux = db.query(Bail).filter(Bail.lot_id == lot_id).all()
        encaissements = self._charger_encaissements(db, {lot_id}, [mois])
        return not rent_calculator.detecter_impayes(baux, encaissements, mois, self.politique)

    def get_statistiques(self, db: Session, mois: Optional[str] = None, immeuble_id: Optional[int] = None,
                         nb_mois: int = NB_MOIS_EVOLUTION_IMPAYES,
                         aujourd_hui: Optional[date] = None) -> dict:
        mois = mois or mois_courant(aujourd_hui)
        rent_calculator.parse_mois(mois)

        mois_list = [rent_calculator.ajouter_mois(mois, -delta) for delta in range(nb_mois)]
        baux = self._charger_baux(db, immeuble_id)
        encaissements = self._charger_encaissements(db, {b.lot_id for b in baux}, mois_list)

        stats = rent_calculator.calculer_statistiques_loyers(
            baux, encaissements, mois, self.politique, aujourd_hui
        )
        stats["evolutionMensuelle"] = rent_calculator.evolution_mensuelle(
            baux, encaissements, mois, nb_mois, self.politique
        )
        logger.info(
            "Statistiques %s: %s impayés, total %s", mois, stats["nbImpayes"], stats["totalImpayes"]
        )
        return stats


impayes_service = ImpayesService()
