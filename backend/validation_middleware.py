"""
Gestion des erreurs de validation et des erreurs de base de données
"""

from fastapi import Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from error_handlers import DatabaseErrorHandler
import logging

logger = logging.getLogger(__name__)

# Préfixes de localisation ajoutés par FastAPI
LOCATION_PREFIXES = ("body", "query", "path", "header", "cookie", "form")


class ValidationErrorHandler:
    """Gestionnaire d'erreurs de validation personnalisé"""

    @staticmethod
    def translate_message(error: dict) -> str:
        """
        Traduit une erreur Pydantic v2 en message utilisateur en français
        """
        error_type = error.get('type', '')
        ctx = error.get('ctx') or {}
        error_msg = error.get('msg', '')

        if error_type == 'missing':
            return 'Ce champ est requis'
        if error_type == 'extra_forbidden':
            return 'Champ non autorisé'
        if error_type == 'enum':
            return f"Valeur invalide, valeurs acceptées: {ctx.get('expected', '')}"
        if error_type == 'string_too_long':
            return f"Ne peut pas dépasser {ctx.get('max_length', 'N/A')} caractères"
        if error_type == 'string_too_short':
            return f"Doit contenir au moins {ctx.get('min_length', 'N/A')} caractères"
        if error_type == 'greater_than_equal':
            return f"Doit être supérieur ou égal à {ctx.get('ge', 'N/A')}"
        if error_type == 'greater_than':
            return f"Doit être strictement supérieur à {ctx.get('gt', 'N/A')}"
        if error_type == 'less_than_equal':
            return f"Doit être inférieur ou égal à {ctx.get('le', 'N/A')}"
        if error_type in ('int_parsing', 'int_type', 'int_from_float'):
            return 'Doit être un nombre entier'
        if error_type in ('decimal_parsing', 'decimal_type', 'float_parsing', 'float_type'):
            return 'Doit être un nombre'
        if error_type in ('bool_parsing', 'bool_type'):
            return 'Doit être vrai ou faux'
        if error_type.startswith('date') or error_type.startswith('datetime'):
            return 'Format de date invalide'
        if error_type == 'value_error':
            # Message de nos validateurs, sans le préfixe ajouté par Pydantic
            if 'email' in error_msg.lower() and 'not a valid' in error_msg.lower():
                return 'Format d\'email invalide'
            return error_msg.replace('Value error, ', '', 1)
        return error_msg

    @staticmethod
    def field_path(loc) -> str:
        parts = [str(x) for x in loc]
        if parts and parts[0] in LOCATION_PREFIXES:
            parts = parts[1:]
        return '.'.join(parts) or 'body'

    @staticmethod
    def format_validation_error(validation_error) -> dict:
        """
        Formate les erreurs de validation: un tableau de messages par champ invalide
        """
        errors = {}

        for error in validation_error.errors():
            field_path = ValidationErrorHandler.field_path(error['loc'])
            message = ValidationErrorHandler.translate_message(error)
            errors.setdefault(field_path, []).append(message)

        return {
            'detail': 'Erreurs de validation',
            'type': 'validation_error',
            'errors': errors
        }


async def validation_exception_handler(request: Request, exc: ValidationError):
    """
    Gestionnaire d'exceptions pour les erreurs de validation Pydantic
    """
    logger.warning("Validation error on %s: %s", request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorHandler.format_validation_error(exc)
    )


async def request_validation_exception_handler(request: Request, exc: RequestValidationError):
    """
    Gestionnaire d'exceptions pour les erreurs de validation de requête FastAPI
    """
    logger.warning("Request validation error on %s: %s", request.url.path, exc.errors())
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=ValidationErrorHandler.format_validation_error(exc)
    )


async def integrity_error_handler(request: Request, exc: IntegrityError):
    """
    Violation de contrainte: 409 avec un message traduit
    """
    logger.warning("Integrity error on %s: %s", request.url.path, exc.orig)
    return DatabaseErrorHandler.handle_integrity_error(exc).to_json_response()


async def sqlalchemy_error_handler(request: Request, exc: SQLAlchemyError):
    logger.exception("Database error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            'detail': 'Erreur interne du serveur',
            'type': 'database_error'
        }
    )


async def general_exception_handler(request: Request, exc: Exception):
    """
    Gestionnaire d'exceptions général pour toutes les autres erreurs
    """
    logger.exception("Unhandled error on %s %s: %s", request.method, request.url.path, exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            'detail': 'Erreur interne du serveur',
            'type': 'server_error'
        }
    )
