"""
Classes de base pour les opérations CRUD
Réduction de la duplication de code pour les opérations courantes
"""
from typing import Type, TypeVar, Generic, Optional, List, Dict, Any
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError
from fastapi import Request
from pydantic import BaseModel
from database import Base
from audit_logger import AuditLogger, get_model_data
from enums import ActionType, EntityType
from error_handlers import NotFoundError, BusinessRuleError, DatabaseErrorHandler
import datetime
import logging

logger = logging.getLogger(__name__)

# Types génériques pour les modèles et schémas
ModelType = TypeVar("ModelType", bound=Base)
CreateSchemaType = TypeVar("CreateSchemaType", bound=BaseModel)
UpdateSchemaType = TypeVar("UpdateSchemaType", bound=BaseModel)


def generer_reference(db: Session, model, prefix: str, avec_annee: bool = True, largeur: int = 4) -> str:
    """
    Génère la prochaine référence libre pour un modèle possédant une colonne `reference`

    Format: PREFIX-YYYY-NNNN (ex: AFF-2024-0001), ou PREFIX-NNN sans l'année
    """
    base = f"{prefix}-{datetime.date.today().year}" if avec_annee else prefix
    existantes = db.query(model.reference).filter(model.reference.like(f"{base}-%")).all()

    numero = 0
    for (reference,) in existantes:
        suffixe = reference[len(base) + 1:]
        if suffixe.isdigit():
            numero = max(numero, int(suffixe))

    return f"{base}-{str(numero + 1).zfill(largeur)}"


def _libelle(db_obj) -> str:
    for attr in ("reference", "nom", "numero"):
        value = getattr(db_obj, attr, None)
        if value:
            return str(value)
    return str(db_obj.id)


class BaseCRUDService(Generic[ModelType, CreateSchemaType, UpdateSchemaType]):
    """
    Service de base pour les opérations CRUD
    Implémente les opérations courantes avec audit logging automatique
    """

    def __init__(
        self,
        model: Type[ModelType],
        entity_type: EntityType,
        entity_name: str = None
    ):
        self.model = model
        self.entity_type = entity_type
        self.entity_name = entity_name or model.__name__

    def _integrity_error(self, db: Session, error: IntegrityError, operation: str):
        db.rollback()
        response = DatabaseErrorHandler.handle_integrity_error(error)
        logger.warning("Erreur d'intégrité lors de la %s de %s: %s", operation, self.entity_name, error.orig)
        raise BusinessRuleError(response.message, response.error_code, status_code=response.status_code)

    def create(
        self,
        db: Session,
        obj_in: CreateSchemaType,
        user_id: int = None,
        request: Request = None,
        **extra
    ) -> ModelType:
        """
        Crée un nouvel objet avec audit logging
        """
        try:
            obj_data = obj_in.model_dump(exclude_unset=True)
            obj_data.update(extra)
            db_obj = self.model(**obj_data)

            db.add(db_obj)
            db.flush()  # Pour obtenir l'ID sans commit

            if request:
                AuditLogger.log_crud_action(
                    db=db,
                    action=ActionType.CREATE,
                    entity_type=self.entity_type,
                    entity_id=db_obj.id,
                    user_id=user_id,
                    description=f"Création de {self.entity_name.lower()}: {_libelle(db_obj)}",
                    after_data=get_model_data(db_obj),
                    request=request
                )

            db.commit()
            db.refresh(db_obj)
            return db_obj

        except IntegrityError as e:
            self._integrity_error(db, e, "création")

    def get(self, db: Session, id: int) -> Optional[ModelType]:
        """
        Récupère un objet par son ID
        """
        return db.query(self.model).filter(self.model.id == id).first()

    def get_or_404(self, db: Session, id: int) -> ModelType:
        db_obj = self.get(db, id)
        if db_obj is None:
            raise NotFoundError(self.entity_name, id)
        return db_obj

    def get_multi(
        self,
        db: Session,
        skip: int = 0,
        limit: int = 100,
        filters: Dict[str, Any] = None,
        order_by=None
    ) -> List[ModelType]:
        """
        Récupère plusieurs objets avec pagination et filtres optionnels
        """
        query = db.query(self.model)

        if filters:
            for key, value in filters.items():
                if hasattr(self.model, key) and value is not None:
                    query = query.filter(getattr(self.model, key) == value)

        query = query.order_by(order_by if order_by is not None else self.model.id)
        return query.offset(skip).limit(limit).all()

    def update(
        self,
        db: Session,
        db_obj: ModelType,
        obj_in: UpdateSchemaType,
        user_id: int = None,
        request: Request = None
    ) -> ModelType:
        """
        Met à jour un objet avec audit logging
        """
        try:
            before_data = get_model_data(db_obj) if request else None

            obj_data = obj_in.model_dump(exclude_unset=True) if isinstance(obj_in, BaseModel) else dict(obj_in)
            for field, value in obj_data.items():
                if hasattr(db_obj, field):
                    setattr(db_obj, field, value)

            db.flush()

            if request:
                AuditLogger.log_crud_action(
                    db=db,
                    action=ActionType.UPDATE,
                    entity_type=self.entity_type,
                    entity_id=db_obj.id,
                    user_id=user_id,
                    description=f"Modification de {self.entity_name.lower()}: {_libelle(db_obj)}",
                    before_data=before_data,
                    after_data=get_model_data(db_obj),
                    request=request
                )

            db.commit()
            db.refresh(db_obj)
            return db_obj

        except IntegrityError as e:
            self._integrity_error(db, e, "modification")

    def delete(
        self,
        db: Session,
        id: int,
        user_id: int = None,
        request: Request = None
    ) -> ModelType:
        """
        Supprime un objet avec audit logging
        """
        db_obj = self.get_or_404(db, id)

        try:
            before_data = get_model_data(db_obj) if request else None

            db.delete(db_obj)
            db.flush()

            if request:
                AuditLogger.log_crud_action(
                    db=db,
                    action=ActionType.DELETE,
                    entity_type=self.entity_type,
                    entity_id=id,
                    user_id=user_id,
                    description=f"Suppression de {self.entity_name.lower()}: {_libelle(db_obj)}",
                    before_data=before_data,
                    request=request
                )

            db.commit()
            return db_obj

        except IntegrityError as e:
            self._integrity_error(db, e, "suppression")
