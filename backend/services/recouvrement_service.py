"""
Service des dossiers de recouvrement, de leurs paiements et des actions menées
"""
import logging
from decimal import Decimal
from typing import Optional, List

from fastapi import Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from audit_logger import AuditLogger, get_model_data
from base_crud import BaseCRUDService, generer_reference
from constants import get_error_message
from enums import ActionType, EntityType, StatutRecouvrement
from error_handlers import NotFoundError, BusinessRuleError
from models import DossierRecouvrement, PaiementRecouvrement, ActionRecouvrement
import schemas

logger = logging.getLogger(__name__)

CENTIME = Decimal("0.01")


def calculer_total_a_recouvrer(montant_principal, penalites_interets) -> Decimal:
    return (Decimal(montant_principal or 0) + Decimal(penalites_interets or 0)).quantize(CENTIME)


class RecouvrementService(BaseCRUDService[DossierRecouvrement, schemas.DossierRecouvrementCreate,
                                          schemas.DossierRecouvrementUpdate]):

    def __init__(self):
        super().__init__(DossierRecouvrement, EntityType.DOSSIER_RECOUVREMENT, "Dossier de recouvrement")

    def creer(self, db: Session, data: schemas.DossierRecouvrementCreate, user_id: int = None,
              request: Request = None) -> DossierRecouvrement:
        reference = data.reference or generer_reference(db, DossierRecouvrement, "REC")
        return self.create(
            db, data, user_id=user_id, request=request,
            reference=reference,
            total_a_recouvrer=calculer_total_a_recouvrer(data.montant_principal, data.penalites_interets),
            created_by=user_id
        )

    def lister(self, db: Session, statut: Optional[StatutRecouvrement] = None, search: Optional[str] = None,
               skip: int = 0, limit: int = 100) -> List[DossierRecouvrement]:
        query = db.query(DossierRecouvrement).options(selectinload(DossierRecouvrement.paiements))
        if statut:
            query = query.filter(DossierRecouvrement.statut == statut)
        if search:
            motif = f"%{search}%"
            query = query.filter(or_(
                DossierRecouvrement.reference.ilike(motif),
                DossierRecouvrement.creancier_nom.ilike(motif),
                DossierRecouvrement.debiteur_nom.ilike(motif),
            ))
        return query.order_by(DossierRecouvrement.created_at.desc()).offset(skip).limit(limit).all()

    def modifier(self, db: Session, dossier_id: int, data: schemas.DossierRecouvrementUpdate,
                 user_id: int = None, request: Request = None) -> DossierRecouvrement:
        dossier = self.get_or_404(db, dossier_id)
        valeurs = data.model_dump(exclude_unset=True)

        if "montant_principal" in valeurs or "penalites_interets" in valeurs:
            principal = valeurs.get("montant_principal", dossier.montant_principal)
            penalites = valeurs.get("penalites_interets", dossier.penalites_interets)
            valeurs["total_a_recouvrer"] = calculer_total_a_recouvrer(principal, penalites)
            if valeurs["total_a_recouvrer"] < dossier.total_paiements:
                raise BusinessRuleError(
                    "Le total à recouvrer ne peut pas être inférieur aux paiements déjà reçus",
                    "TOTAL_INFERIEUR_PAIEMENTS"
                )

        return self.update(db, dossier, valeurs, user_id=user_id, request=request)

    # ---------- paiements ----------

    def lister_paiements(self, db: Session, dossier_id: int) -> List[PaiementRecouvrement]:
        return list(self.get_or_404(db, dossier_id).paiements)

    def ajouter_paiement(self, db: Session, dossier_id: int, data: schemas.PaiementCreate,
                         user_id: int = None, request: Request = None) -> PaiementRecouvrement:
        """
        Enregistre un paiement; un montant supérieur au solde restant est refusé
        """
        dossier = self.get_or_404(db, dossier_id)
        solde = dossier.solde_restant

        if Decimal(data.montant) > solde:
            logger.warning("Paiement de %s refusé sur %s (solde %s)", data.montant, dossier.reference, solde)
            raise BusinessRuleError(
                get_error_message("PAIEMENT_SUPERIEUR_SOLDE"), "PAIEMENT_SUPERIEUR_SOLDE",
                details={"solde_restant": float(solde)}
            )

        paiement = PaiementRecouvrement(dossier_id=dossier.id, created_by=user_id, **data.model_dump())
        db.add(paiement)
        db.flush()

        # Dossier soldé: clôture automatique
        db.refresh(dossier)
        if dossier.solde_restant <= 0 and dossier.statut == StatutRecouvrement.EN_COURS:
            dossier.statut = StatutRecouvrement.CLOTURE
            logger.info("Dossier %s soldé, clôturé", dossier.reference)

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.CREATE,
            entity_type=EntityType.PAIEMENT_RECOUVREMENT,
            entity_id=paiement.id,
            user_id=user_id,
            description=f"Paiement de {paiement.montant} sur le dossier {dossier.reference}",
            after_data=get_model_data(paiement),
            request=request
        )
        db.commit()
        db.refresh(paiement)
        return paiement

    def supprimer_paiement(self, db: Session, paiement_id: int, user_id: int = None,
                           request: Request = None) -> PaiementRecouvrement:
        paiement = db.query(PaiementRecouvrement).filter(PaiementRecouvrement.id == paiement_id).first()
        if paiement is None:
            raise NotFoundError("Paiement", paiement_id)

        dossier = paiement.dossier
        before_data = get_model_data(paiement)
        db.delete(paiement)
        db.flush()
        db.refresh(dossier)

        # Un dossier clôturé redevient en cours s'il reste un solde
        if dossier.statut == StatutRecouvrement.CLOTURE and dossier.solde_restant > 0:
            dossier.statut = StatutRecouvrement.EN_COURS

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.DELETE,
            entity_type=EntityType.PAIEMENT_RECOUVREMENT,
            entity_id=paiement_id,
            user_id=user_id,
            description=f"Suppression d'un paiement du dossier {dossier.reference}",
            before_data=before_data,
            request=request
        )
        db.commit()
        return paiement

    # ---------- actions ----------

    def get_action(self, db: Session, action_id: int) -> ActionRecouvrement:
        action = db.query(ActionRecouvrement).filter(ActionRecouvrement.id == action_id).first()
        if action is None:
            raise NotFoundError("Action de recouvrement", action_id)
        return action

    def lister_actions(self, db: Session, dossier_id: Optional[int] = None, skip: int = 0,
                       limit: int = 100) -> List[ActionRecouvrement]:
        query = db.query(ActionRecouvrement).options(selectinload(ActionRecouvrement.dossier))
        if dossier_id is not None:
            self.get_or_404(db, dossier_id)
            query = query.filter(ActionRecouvrement.dossier_id == dossier_id)
        return query.order_by(ActionRecouvrement.date.desc(), ActionRecouvrement.id.desc()) \
            .offset(skip).limit(limit).all()

    def ajouter_action(self, db: Session, dossier_id: int, data: schemas.ActionCreate,
                       user_id: int = None, request: Request = None) -> ActionRecouvrement:
        dossier = self.get_or_404(db, dossier_id)
        action = ActionRecouvrement(dossier_id=dossier.id, created_by=user_id, **data.model_dump())
        db.add(action)
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.CREATE,
            entity_type=EntityType.ACTION_RECOUVREMENT,
            entity_id=action.id,
            user_id=user_id,
            description=f"Action {action.type_action.value} sur le dossier {dossier.reference}",
            after_data=get_model_data(action),
            request=request
        )
        db.commit()
        db.refresh(action)
        logger.info("Action %s enregistrée sur %s", action.type_action.value, dossier.reference)
        return action

    def modifier_action(self, db: Session, action_id: int, data: schemas.ActionUpdate,
                        user_id: int = None, request: Request = None) -> ActionRecouvrement:
        action = self.get_action(db, action_id)
        valeurs = data.model_dump(exclude_unset=True)

        date_action = valeurs.get("date", action.date)
        echeance = valeurs.get("echeance_prochaine_etape", action.echeance_prochaine_etape)
        if echeance and echeance < date_action:
            raise BusinessRuleError(get_error_message("ECHEANCE_AVANT_ACTION"), "ECHEANCE_AVANT_ACTION")

        before_data = get_model_data(action)
        for field, value in valeurs.items():
            setattr(action, field, value)
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.UPDATE,
            entity_type=EntityType.ACTION_RECOUVREMENT,
            entity_id=action.id,
            user_id=user_id,
            description=f"Modification d'une action du dossier {action.dossier.reference}",
            before_data=before_data,
            after_data=get_model_data(action),
            request=request
        )
        db.commit()
        db.refresh(action)
        return action

    def supprimer_action(self, db: Session, action_id: int, user_id: int = None,
                         request: Request = None) -> ActionRecouvrement:
        action = self.get_action(db, action_id)
        reference = action.dossier.reference
        before_data = get_model_data(action)
        db.delete(action)
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.DELETE,
            entity_type=EntityType.ACTION_RECOUVREMENT,
            entity_id=action_id,
            user_id=user_id,
            description=f"Suppression d'une action du dossier {reference}",
            before_data=before_data,
            request=request
        )
        db.commit()
        return action

    # ---------- statistiques ----------

    def get_statistiques(self, db: Session) -> dict:
        dossiers = db.query(DossierRecouvrement).options(selectinload(DossierRecouvrement.paiements)).all()

        total_a_recouvrer = sum((Decimal(d.total_a_recouvrer) for d in dossiers), Decimal("0"))
        total_paiements = sum((d.total_paiements for d in dossiers), Decimal("0"))
        par_statut = {statut.value: 0 for statut in StatutRecouvrement}
        for dossier in dossiers:
            par_statut[dossier.statut.value] += 1

        taux = round(float(total_paiements * 100 / total_a_recouvrer), 2) if total_a_recouvrer else 0.0
        return {
            "nombreDossiers": len(dossiers),
            "parStatut": par_statut,
            "totalARecouvrer": float(total_a_recouvrer.quantize(CENTIME)),
            "totalPaiements": float(total_paiements.quantize(CENTIME)),
            "soldeRestant": float((total_a_recouvrer - total_paiements).quantize(CENTIME)),
            "tauxRecouvrement": taux,
        }


recouvrement_service = RecouvrementService()
