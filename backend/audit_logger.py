from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError
from fastapi import Request
from enums import ActionType, EntityType
import models
import json
import logging
from typing import Optional, Dict, Any
from datetime import datetime, date
from decimal import Decimal

logger = logging.getLogger(__name__)


class AuditLogger:
    """Service de journalisation des actions dans la table audit_logs"""

    @staticmethod
    def log_action(
        db: Session,
        action: ActionType,
        entity_type: EntityType,
        description: str,
        user_id: Optional[int] = None,
        entity_id: Optional[int] = None,
        details: Optional[Dict[Any, Any]] = None,
        request: Optional[Request] = None,
        status_code: Optional[int] = None,
        process_time_ms: Optional[float] = None
    ):
        """
        Enregistre une action dans la base de données

        Args:
            db: Session de base de données
            action: Type d'action (CREATE, UPDATE, etc.)
            entity_type: Type d'entité concernée (AUDIENCE, LOT, etc.)
            description: Description de l'action
            user_id: ID de l'utilisateur qui effectue l'action
            entity_id: ID de l'entité concernée
            details: Détails supplémentaires (avant/après, erreurs, etc.)
            request: Requête FastAPI pour récupérer IP, user-agent, etc.
            status_code: Code de statut HTTP
            process_time_ms: Durée de traitement de la requête
        """
        ip_address = None
        user_agent = None
        endpoint = None
        method = None

        if request:
            ip_address = request.client.host if request.client else None
            user_agent = request.headers.get("user-agent")
            endpoint = str(request.url.path)
            method = request.method

        details_json = None
        if details:
            try:
                details_json = json.dumps(details, default=str, ensure_ascii=False)
            except (TypeError, ValueError) as e:
                details_json = f"Erreur de sérialisation: {str(e)}"

        audit_log = models.AuditLog(
            user_id=user_id,
            action=action,
            entity_type=entity_type,
            entity_id=entity_id,
            description=description[:500] if description else description,
            details=details_json,
            ip_address=ip_address,
            user_agent=user_agent[:500] if user_agent else None,
            endpoint=endpoint,
            method=method,
            status_code=status_code,
            process_time_ms=process_time_ms
        )

        db.add(audit_log)
        try:
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Erreur lors de l'enregistrement du log d'audit: %s", e)

    @staticmethod
    def log_crud_action(db: Session, action: ActionType, entity_type: EntityType,
                        entity_id: int, user_id: int, description: str,
                        before_data: Dict = None, after_data: Dict = None, request: Request = None):
        """Log spécialisé pour les actions CRUD"""
        details = {}
        if before_data:
            details["before"] = before_data
        if after_data:
            details["after"] = after_data

        AuditLogger.log_action(
            db=db,
            action=action,
            entity_type=entity_type,
            description=description,
            user_id=user_id,
            entity_id=entity_id,
            details=details,
            request=request,
            status_code=200
        )

    @staticmethod
    def log_error(db: Session, description: str, user_id: int = None,
                  error_details: str = None, request: Request = None, status_code: int = 500,
                  entity_type: EntityType = EntityType.SYSTEM):
        """Log spécialisé pour les erreurs"""
        details = {"error": error_details} if error_details else None

        AuditLogger.log_action(
            db=db,
            action=ActionType.ERROR,
            entity_type=entity_type,
            description=description,
            user_id=user_id,
            details=details,
            request=request,
            status_code=status_code
        )

def get_model_data(obj) -> Dict:
    """
    Convertit un objet SQLAlchemy en dictionnaire pour le logging
    """
    if obj is None:
        return {}

    data = {}
    for column in obj.__table__.columns:
        if column.name == "hashed_password":
            continue
        value = getattr(obj, column.name)
        if isinstance(value, (datetime, date)):
            value = value.isoformat()
        elif isinstance(value, Decimal):
            value = str(value)
        data[column.name] = value
    return data
