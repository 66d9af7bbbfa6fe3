"""
Service des audiences
Création, consultation, résultats et rappels d'enrôlement
"""
import logging
from datetime import datetime
from typing import List, Optional

from fastapi import Request
from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from audit_logger import AuditLogger, get_model_data
from base_crud import BaseCRUDService
from constants import get_error_message
from enums import ActionType, EntityType, StatutAudience, TypeAudience, TypeResultatAudience
from error_handlers import NotFoundError, BusinessRuleError
from models import Affaire, Audience, ResultatAudience
import schemas
from services.audience_status import (
    calculer_statut, calculer_date_rappel, calculer_statistiques,
    filtrer_rappels_en_attente, en_utc_naif, statut_audience
)

logger = logging.getLogger(__name__)


class AudienceService(BaseCRUDService[Audience, schemas.AudienceCreate, schemas.AudienceUpdate]):
    """
    Les lectures recalculent le statut dérivé et le persistent s'il a changé
    """

    def __init__(self):
        super().__init__(Audience, EntityType.AUDIENCE, "Audience")

    # ---------- statut ----------

    def _synchroniser_statuts(self, db: Session, audiences: List[Audience],
                              maintenant: Optional[datetime] = None) -> int:
        maintenant = maintenant or datetime.utcnow()
        modifiees = 0
        for audience in audiences:
            statut = statut_audience(audience, maintenant)
            if audience.statut != statut:
                logger.debug("Audience %s: %s -> %s", audience.id, audience.statut, statut)
                audience.statut = statut
                modifiees += 1
        if modifiees:
            db.commit()
        return modifiees

    def _query(self, db: Session):
        return db.query(Audience).options(
            selectinload(Audience.affaire),
            selectinload(Audience.resultats)
        )

    # ---------- CRUD ----------

    def creer(self, db: Session, data: schemas.AudienceCreate, user_id: int = None,
              request: Request = None) -> Audience:
        affaire = db.query(Affaire).filter(Affaire.id == data.affaire_id).first()
        if affaire is None:
            logger.warning("Création d'audience refusée: affaire %s introuvable", data.affaire_id)
            raise NotFoundError("Affaire", data.affaire_id)

        date_audience = en_utc_naif(data.date)
        return self.create(
            db, data, user_id=user_id, request=request,
            date=date_audience,
            statut=calculer_statut(date_audience, False),
            date_rappel_enrolement=calculer_date_rappel(date_audience),
            created_by=user_id
        )

    def lister(self, db: Session, statut: Optional[StatutAudience] = None,
               type: Optional[TypeAudience] = None, affaire_id: Optional[int] = None,
               date_debut: Optional[datetime] = None, date_fin: Optional[datetime] = None,
               search: Optional[str] = None, skip: int = 0, limit: int = 100) -> List[Audience]:
        query = self._query(db)

        if type:
            query = query.filter(Audience.type == type)
        if affaire_id:
            query = query.filter(Audience.affaire_id == affaire_id)
        if date_debut:
            query = query.filter(Audience.date >= en_utc_naif(date_debut))
        if date_fin:
            query = query.filter(Audience.date <= en_utc_naif(date_fin))
        if search:
            motif = f"%{search}%"
            query = query.join(Audience.affaire).filter(or_(
                Audience.juridiction.ilike(motif),
                Audience.chambre.ilike(motif),
                Audience.ville.ilike(motif),
                Affaire.reference.ilike(motif),
                Affaire.intitule.ilike(motif),
            ))

        audiences = query.order_by(Audience.date).all()
        self._synchroniser_statuts(db, audiences)

        # Le filtre de statut porte sur la valeur dérivée, pas sur le cache
        if statut:
            audiences = [a for a in audiences if a.statut == statut]
        return audiences[skip:skip + limit]

    def obtenir(self, db: Session, audience_id: int) -> Audience:
        audience = self._query(db).filter(Audience.id == audience_id).first()
        if audience is None:
            raise NotFoundError("Audience", audience_id)
        self._synchroniser_statuts(db, [audience])
        return audience

    def modifier(self, db: Session, audience_id: int, data: schemas.AudienceUpdate,
                 user_id: int = None, request: Request = None) -> Audience:
        audience = self.obtenir(db, audience_id)
        valeurs = data.model_dump(exclude_unset=True)

        if valeurs.get("date") is not None:
            valeurs["date"] = en_utc_naif(valeurs["date"])
            # La date de rappel suit la date d'audience
            valeurs["date_rappel_enrolement"] = calculer_date_rappel(valeurs["date"])
            valeurs["statut"] = calculer_statut(valeurs["date"], bool(audience.resultats))

        return self.update(db, audience, valeurs, user_id=user_id, request=request)

    def supprimer(self, db: Session, audience_id: int, user_id: int = None, request: Request = None):
        return self.delete(db, audience_id, user_id=user_id, request=request)

    # ---------- résultats ----------

    def creer_resultat(self, db: Session, audience_id: int, data: schemas.ResultatAudienceCreate,
                       user_id: int = None, request: Request = None) -> ResultatAudience:
        audience = self.obtenir(db, audience_id)

        if audience.resultats:
            logger.warning("Audience %s: un résultat existe déjà", audience_id)
            raise BusinessRuleError(
                get_error_message("RESULTAT_EXISTANT"), "RESULTAT_EXISTANT", status_code=409
            )

        valeurs = data.model_dump()
        valeurs["nouvelle_date"] = en_utc_naif(valeurs.get("nouvelle_date"))
        resultat = ResultatAudience(audience_id=audience.id, created_by=user_id, **valeurs)
        db.add(resultat)
        audience.statut = StatutAudience.RENSEIGNEE
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.CREATE,
            entity_type=EntityType.RESULTAT_AUDIENCE,
            entity_id=resultat.id,
            user_id=user_id,
            description=f"Résultat {resultat.type.value} enregistré pour l'audience {audience.id}",
            after_data=get_model_data(resultat),
            request=request
        )
        db.commit()
        db.refresh(resultat)
        logger.info("Résultat %s enregistré pour l'audience %s", resultat.type.value, audience.id)
        return resultat

    def get_resultat(self, db: Session, audience_id: int) -> ResultatAudience:
        audience = self.obtenir(db, audience_id)
        if audience.resultat is None:
            raise NotFoundError("Résultat d'audience", audience_id)
        return audience.resultat

    def update_resultat(self, db: Session, audience_id: int, data: schemas.ResultatAudienceUpdate,
                        user_id: int = None, request: Request = None) -> ResultatAudience:
        resultat = self.get_resultat(db, audience_id)
        before_data = get_model_data(resultat)
        valeurs = data.model_dump(exclude_unset=True)

        type_final = valeurs.get("type", resultat.type)
        date_finale = valeurs["nouvelle_date"] if "nouvelle_date" in valeurs else resultat.nouvelle_date
        if type_final == TypeResultatAudience.RENVOI and date_finale is None:
            raise BusinessRuleError(
                get_error_message("RENVOI_SANS_DATE"), "RENVOI_SANS_DATE", details={"champ": "nouvelle_date"}
            )

        for field, value in valeurs.items():
            if field == "nouvelle_date":
                value = en_utc_naif(value)
            setattr(resultat, field, value)
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.UPDATE,
            entity_type=EntityType.RESULTAT_AUDIENCE,
            entity_id=resultat.id,
            user_id=user_id,
            description=f"Modification du résultat de l'audience {audience_id}",
            before_data=before_data,
            after_data=get_model_data(resultat),
            request=request
        )
        db.commit()
        db.refresh(resultat)
        return resultat

    def delete_resultat(self, db: Session, audience_id: int, user_id: int = None,
                        request: Request = None) -> Audience:
        audience = self.obtenir(db, audience_id)
        if not audience.resultats:
            raise NotFoundError("Résultat d'audience", audience_id)

        before_data = [get_model_data(r) for r in audience.resultats]
        for resultat in list(audience.resultats):
            audience.resultats.remove(resultat)
        db.flush()

        # Sans résultat, le statut redevient celui dicté par la date
        audience.statut = calculer_statut(audience.date, False)

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.DELETE,
            entity_type=EntityType.RESULTAT_AUDIENCE,
            entity_id=audience_id,
            user_id=user_id,
            description=f"Suppression du résultat de l'audience {audience_id}",
            before_data={"resultats": before_data},
            request=request
        )
        db.commit()
        db.refresh(audience)
        return audience

    # ---------- enrôlement ----------

    def marquer_enrolement_effectue(self, db: Session, audience_id: int, user_id: int = None,
                                    request: Request = None) -> Audience:
        audience = self.obtenir(db, audience_id)
        return self.update(db, audience, {"enrolement_effectue": True}, user_id=user_id, request=request)

    def get_rappels_enrolement(self, db: Session, echus_seulement: bool = False) -> List[Audience]:
        audiences = self._query(db).filter(
            Audience.rappel_enrolement.is_(True),
            Audience.enrolement_effectue.is_(False)
        ).order_by(Audience.date).all()
        self._synchroniser_statuts(db, audiences)
        return filtrer_rappels_en_attente(audiences, echus_seulement=echus_seulement)

    # ---------- statistiques ----------

    def get_statistiques(self, db: Session) -> dict:
        audiences = self._query(db).all()
        maintenant = datetime.utcnow()
        self._synchroniser_statuts(db, audiences, maintenant)
        return calculer_statistiques(audiences, maintenant)

    def rafraichir_statuts(self, db: Session) -> dict:
        """Recalcule et persiste le statut de toutes les audiences"""
        audiences = self._query(db).all()
        modifiees = self._synchroniser_statuts(db, audiences)
        logger.info("Rafraîchissement des statuts: %s/%s audiences mises à jour", modifiees, len(audiences))
        return {"total": len(audiences), "misesAJour": modifiees}


audience_service = AudienceService()
