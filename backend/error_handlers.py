"""
Gestionnaires d'erreurs centralisés pour l'application LexImmo
Standardisation de la gestion et du format des erreurs
"""
from typing import Dict, Any, Union
from fastapi import Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from constants import get_error_message
import logging

logger = logging.getLogger(__name__)


class ErrorResponse:
    """Structure standardisée pour les réponses d'erreur"""

    def __init__(
        self,
        message: str,
        error_code: str = None,
        details: Dict[str, Any] = None,
        status_code: int = 400
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Convertit en dictionnaire pour la réponse JSON"""
        response = {
            "error": True,
            "message": self.message,
            # Clé lue par les clients FastAPI habituels
            "detail": self.message,
        }

        if self.error_code:
            response["error_code"] = self.error_code

        if self.details:
            response["details"] = self.details

        return response

    def to_json_response(self) -> JSONResponse:
        """Retourne une JSONResponse FastAPI"""
        return JSONResponse(
            status_code=self.status_code,
            content=self.to_dict()
        )


# ==================== EXCEPTIONS MÉTIER ====================

class AppError(Exception):
    """Erreur applicative convertie en ErrorResponse par le gestionnaire global"""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = "APP_ERROR"

    def __init__(self, message: str, error_code: str = None, details: Dict[str, Any] = None,
                 status_code: int = None):
        super().__init__(message)
        self.message = message
        if error_code:
            self.error_code = error_code
        if status_code:
            self.status_code = status_code
        self.details = details or {}

    def to_response(self) -> ErrorResponse:
        return ErrorResponse(self.message, self.error_code, self.details, self.status_code)


class NotFoundError(AppError):
    status_code = status.HTTP_404_NOT_FOUND
    error_code = "RESOURCE_NOT_FOUND"

    def __init__(self, resource: str = "Ressource", resource_id: Union[int, str] = None):
        message = f"{resource} non trouvé(e)"
        if resource_id is not None:
            message += f" (ID: {resource_id})"
        super().__init__(message, details={"resource_type": resource, "resource_id": resource_id})


class BusinessRuleError(AppError):
    """Règle métier violée (400 par défaut, 409 pour les conflits)"""
    error_code = "BUSINESS_RULE"


class PermissionDeniedError(AppError):
    status_code = status.HTTP_403_FORBIDDEN
    error_code = "ACCESS_DENIED"

    def __init__(self, message: str = None):
        super().__init__(message or get_error_message("ACCESS_DENIED"))


# ==================== ERREURS BASE DE DONNÉES ====================

class DatabaseErrorHandler:
    """Gestionnaire pour les erreurs de base de données"""

    @staticmethod
    def handle_integrity_error(error: IntegrityError) -> ErrorResponse:
        """
        Traduit une erreur d'intégrité (PostgreSQL ou SQLite) en réponse lisible
        """
        error_message = str(getattr(error, "orig", error))
        lowered = error_message.lower()

        if "duplicate key" in lowered or "unique constraint" in lowered:
            return ErrorResponse(
                message=get_error_message("DUPLICATE_ENTRY"),
                error_code="DUPLICATE_ENTRY",
                status_code=status.HTTP_409_CONFLICT
            )

        if "foreign key" in lowered and ("still referenced" in lowered or "delete" in lowered):
            return ErrorResponse(
                message=get_error_message("PARENT_ROW_CONSTRAINT"),
                error_code="PARENT_ROW_CONSTRAINT",
                status_code=status.HTTP_409_CONFLICT
            )

        if "foreign key" in lowered:
            return ErrorResponse(
                message=get_error_message("FOREIGN_KEY_VIOLATION"),
                error_code="FOREIGN_KEY_VIOLATION",
                status_code=status.HTTP_409_CONFLICT
            )

        if "not null" in lowered:
            return ErrorResponse(
                message="Un champ requis est manquant",
                error_code="NOT_NULL_VIOLATION",
                status_code=status.HTTP_409_CONFLICT
            )

        return ErrorResponse(
            message="Erreur de contrainte de base de données",
            error_code="INTEGRITY_ERROR",
            status_code=status.HTTP_409_CONFLICT
        )


async def app_error_handler(request: Request, exc: AppError):
    """
    Gestionnaire des erreurs métier levées par les services
    """
    logger.info("Erreur métier sur %s %s: %s", request.method, request.url.path, exc.message)
    return exc.to_response().to_json_response()
