"""
Service des arriérés de loyers

Un arriéré couvre une période d'un lot antérieure à la prise en gestion;
il est apuré par des paiements partiels jusqu'à être soldé.
"""
import datetime
import logging
from decimal import Decimal
from typing import Optional, List

from fastapi import Request
from sqlalchemy.orm import Session, selectinload

from audit_logger import AuditLogger, get_model_data
from base_crud import BaseCRUDService
from constants import get_error_message
from enums import ActionType, EntityType, StatutArrierage
from error_handlers import NotFoundError, BusinessRuleError
from models import Arrierage, PaiementPartielArrierage, Lot
import schemas

logger = logging.getLogger(__name__)

CENTIME = Decimal("0.01")


def _montant(valeur) -> float:
    return float(Decimal(valeur).quantize(CENTIME))


class ArrierageService(BaseCRUDService[Arrierage, schemas.ArrierageCreate, schemas.ArrierageUpdate]):

    def __init__(self):
        super().__init__(Arrierage, EntityType.ARRIERAGE, "Arriéré")

    def _verifier_chevauchement(self, db: Session, lot_id: int, debut: datetime.date, fin: datetime.date,
                                exclure_id: int = None):
        # Bornes incluses: deux périodes qui partagent un jour se chevauchent
        query = db.query(Arrierage).filter(
            Arrierage.lot_id == lot_id,
            Arrierage.periode_debut <= fin,
            Arrierage.periode_fin >= debut,
        )
        if exclure_id is not None:
            query = query.filter(Arrierage.id != exclure_id)
        existant = query.first()
        if existant:
            raise BusinessRuleError(
                get_error_message("CHEVAUCHEMENT_ARRIERAGE"), "CHEVAUCHEMENT_ARRIERAGE",
                details={"arrierage_id": existant.id}
            )

    def creer(self, db: Session, data: schemas.ArrierageCreate, user_id: int = None,
              request: Request = None) -> Arrierage:
        if db.query(Lot).filter(Lot.id == data.lot_id).first() is None:
            raise NotFoundError("Lot", data.lot_id)

        self._verifier_chevauchement(db, data.lot_id, data.periode_debut, data.periode_fin)

        arrierage = self.create(
            db, data, user_id=user_id, request=request,
            montant_paye=Decimal("0"),
            montant_restant=data.montant_du,
            statut=StatutArrierage.EN_COURS,
            created_by=user_id
        )
        logger.info("Arriéré %s créé sur le lot %s (%s)", arrierage.id, data.lot_id, data.montant_du)
        return arrierage

    def lister(self, db: Session, immeuble_id: Optional[int] = None, locataire_id: Optional[int] = None,
               lot_id: Optional[int] = None, statut: Optional[StatutArrierage] = None,
               skip: int = 0, limit: int = 100) -> List[Arrierage]:
        query = db.query(Arrierage).options(selectinload(Arrierage.paiements_partiels))
        if lot_id:
            query = query.filter(Arrierage.lot_id == lot_id)
        elif immeuble_id or locataire_id:
            query = query.join(Arrierage.lot)
            if immeuble_id:
                query = query.filter(Lot.immeuble_id == immeuble_id)
            if locataire_id:
                query = query.filter(Lot.locataire_id == locataire_id)
        if statut:
            query = query.filter(Arrierage.statut == statut)
        return query.order_by(Arrierage.periode_debut.desc()).offset(skip).limit(limit).all()

    def modifier(self, db: Session, arrierage_id: int, data: schemas.ArrierageUpdate,
                 user_id: int = None, request: Request = None) -> Arrierage:
        """
        Met à jour la période ou le montant dû; le restant et le statut sont recalculés
        """
        arrierage = self.get_or_404(db, arrierage_id)
        valeurs = data.model_dump(exclude_unset=True)

        debut = valeurs.get("periode_debut", arrierage.periode_debut)
        fin = valeurs.get("periode_fin", arrierage.periode_fin)
        if debut >= fin:
            raise BusinessRuleError(get_error_message("PERIODE_INVALIDE"), "PERIODE_INVALIDE")
        if "periode_debut" in valeurs or "periode_fin" in valeurs:
            self._verifier_chevauchement(db, arrierage.lot_id, debut, fin, exclure_id=arrierage.id)

        if "montant_du" in valeurs:
            paye = Decimal(arrierage.montant_paye)
            if valeurs["montant_du"] < paye:
                raise BusinessRuleError(
                    get_error_message("MONTANT_DU_INFERIEUR_PAYE"), "MONTANT_DU_INFERIEUR_PAYE",
                    details={"montant_paye": _montant(paye)}
                )
            valeurs["montant_restant"] = valeurs["montant_du"] - paye
            valeurs["statut"] = StatutArrierage.SOLDE if valeurs["montant_restant"] <= 0 else StatutArrierage.EN_COURS

        return self.update(db, arrierage, valeurs, user_id=user_id, request=request)

    # ---------- paiements partiels ----------

    def enregistrer_paiement(self, db: Session, arrierage_id: int, data: schemas.PaiementPartielCreate,
                             user_id: int = None, request: Request = None) -> Arrierage:
        """
        Enregistre un paiement partiel et met à jour payé, restant et statut
        """
        arrierage = self.get_or_404(db, arrierage_id)

        if arrierage.statut == StatutArrierage.SOLDE:
            raise BusinessRuleError(get_error_message("ARRIERAGE_SOLDE"), "ARRIERAGE_SOLDE")

        restant = Decimal(arrierage.montant_restant)
        if data.montant > restant:
            logger.warning("Paiement de %s refusé sur l'arriéré %s (restant %s)", data.montant, arrierage.id, restant)
            raise BusinessRuleError(
                get_error_message("PAIEMENT_SUPERIEUR_RESTANT"), "PAIEMENT_SUPERIEUR_RESTANT",
                details={"montant_restant": _montant(restant)}
            )

        paiement = PaiementPartielArrierage(arrierage_id=arrierage.id, created_by=user_id, **data.model_dump())
        db.add(paiement)

        arrierage.montant_paye = Decimal(arrierage.montant_paye) + data.montant
        arrierage.montant_restant = max(Decimal("0"), Decimal(arrierage.montant_du) - arrierage.montant_paye)
        if arrierage.montant_restant <= 0:
            arrierage.statut = StatutArrierage.SOLDE
            logger.info("Arriéré %s soldé", arrierage.id)
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.CREATE,
            entity_type=EntityType.PAIEMENT_ARRIERAGE,
            entity_id=paiement.id,
            user_id=user_id,
            description=f"Paiement partiel de {paiement.montant} sur l'arriéré {arrierage.id}",
            after_data=get_model_data(paiement),
            request=request
        )
        db.commit()
        db.refresh(arrierage)
        return arrierage

    # ---------- statistiques ----------

    def _charger(self, db: Session, immeuble_id: Optional[int], statut: Optional[StatutArrierage] = None):
        query = db.query(Arrierage).join(Arrierage.lot).options(
            selectinload(Arrierage.lot).selectinload(Lot.immeuble),
            selectinload(Arrierage.lot).selectinload(Lot.locataire),
        )
        if immeuble_id:
            query = query.filter(Lot.immeuble_id == immeuble_id)
        if statut:
            query = query.filter(Arrierage.statut == statut)
        return query.all()

    def get_statistiques(self, db: Session, immeuble_id: Optional[int] = None) -> dict:
        arrierages = self._charger(db, immeuble_id)
        en_cours = [a for a in arrierages if a.statut == StatutArrierage.EN_COURS]
        soldes = [a for a in arrierages if a.statut == StatutArrierage.SOLDE]

        total_restant = sum((Decimal(a.montant_restant) for a in en_cours), Decimal("0"))
        total_paye = sum((Decimal(a.montant_paye) for a in arrierages), Decimal("0"))

        repartition = {}
        for arrierage in en_cours:
            immeuble = arrierage.lot.immeuble
            ligne = repartition.setdefault(immeuble.id, {
                "immeubleId": immeuble.id, "immeubleNom": immeuble.nom,
                "montantTotal": Decimal("0"), "nombreArrierages": 0,
            })
            ligne["montantTotal"] += Decimal(arrierage.montant_restant)
            ligne["nombreArrierages"] += 1

        maintenant = datetime.datetime.utcnow()
        anciennetes = [(maintenant - a.created_at).days for a in en_cours]
        anciennete_moyenne = round(sum(anciennetes) / len(anciennetes)) if anciennetes else 0

        # Aucun arriéré: recouvrement complet
        if total_restant == 0 and total_paye == 0:
            taux = 100
        else:
            taux = round(float(total_paye * 100 / (total_restant + total_paye)))

        return {
            "totalMontantArrierage": _montant(total_restant),
            "nombreArrieragesEnCours": len(en_cours),
            "totalMontantPaye": _montant(total_paye),
            "nombreArrieragesSoldes": len(soldes),
            "repartitionParImmeuble": sorted(
                ({**ligne, "montantTotal": _montant(ligne["montantTotal"])} for ligne in repartition.values()),
                key=lambda ligne: ligne["montantTotal"], reverse=True
            ),
            "ancienneteMoyenne": anciennete_moyenne,
            "tauxRecouvrement": taux,
        }

    def get_repartition_par_locataire(self, db: Session, immeuble_id: Optional[int] = None) -> List[dict]:
        repartition = {}
        for arrierage in self._charger(db, immeuble_id, StatutArrierage.EN_COURS):
            locataire = arrierage.lot.locataire
            cle = locataire.id if locataire else None
            ligne = repartition.setdefault(cle, {
                "locataireId": cle,
                "locataireNom": locataire.nom_complet if locataire else "Sans locataire",
                "montantTotal": Decimal("0"), "nombreArrierages": 0,
            })
            ligne["montantTotal"] += Decimal(arrierage.montant_restant)
            ligne["nombreArrierages"] += 1

        return sorted(
            ({**ligne, "montantTotal": _montant(ligne["montantTotal"])} for ligne in repartition.values()),
            key=lambda ligne: ligne["montantTotal"], reverse=True
        )


arrierage_service = ArrierageService()
