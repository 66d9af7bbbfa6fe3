"""
Configuration centralisée de l'application LexImmo
Organisation des routes, middleware et gestionnaires d'exceptions
"""
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from pydantic import ValidationError

# Import des modules de configuration
from database import engine, SessionLocal
import models

# Import des middlewares et gestionnaires d'erreurs
from middleware import AuditMiddleware
from error_handlers import AppError, app_error_handler
from validation_middleware import (
    validation_exception_handler, request_validation_exception_handler,
    integrity_error_handler, sqlalchemy_error_handler, general_exception_handler
)

# Import des contrôleurs et routes
from controllers.auth_controller import router as auth_router
import affaire_routes
import arrierage_routes
import audience_routes
import depense_affaire_routes
import honoraire_routes
import immobilier_routes
import impayes_routes
import import_routes
import recouvrement_routes
import user_routes

# Import des constantes
from constants import APP_NAME, APP_VERSION, APP_DESCRIPTION, CORS_ORIGINS


class AppConfigurator:
    """
    Configurateur centralisé pour l'application FastAPI
    """

    @staticmethod
    def create_app(session_factory=None, create_tables: bool = True) -> FastAPI:
        """
        Crée et configure l'application FastAPI

        session_factory remplace SessionLocal pour le journal d'audit du middleware
        """
        if create_tables:
            bind = session_factory.kw.get("bind") if session_factory is not None else engine
            models.Base.metadata.create_all(bind=bind)

        app = FastAPI(
            title=APP_NAME,
            version=APP_VERSION,
            description=APP_DESCRIPTION
        )

        AppConfigurator._configure_middlewares(app, session_factory or SessionLocal)
        AppConfigurator._configure_exception_handlers(app)
        AppConfigurator._configure_routes(app)

        return app

    @staticmethod
    def _configure_middlewares(app: FastAPI, session_factory):
        """
        Configure tous les middlewares
        """
        # Middleware d'audit
        app.add_middleware(AuditMiddleware, session_factory=session_factory)

        # CORS (ajouté en dernier, donc exécuté en premier)
        app.add_middleware(
            CORSMiddleware,
            allow_origins=CORS_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["*"],
        )

    @staticmethod
    def _configure_exception_handlers(app: FastAPI):
        """
        Configure tous les gestionnaires d'exceptions
        """
        app.add_exception_handler(AppError, app_error_handler)
        app.add_exception_handler(ValidationError, validation_exception_handler)
        app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
        app.add_exception_handler(IntegrityError, integrity_error_handler)
        app.add_exception_handler(SQLAlchemyError, sqlalchemy_error_handler)
        app.add_exception_handler(Exception, general_exception_handler)

    @staticmethod
    def _configure_routes(app: FastAPI):
        """
        Configure toutes les routes de l'application
        """
        # Routes d'authentification
        app.include_router(auth_router)
        app.include_router(user_routes.router)

        # Contentieux
        app.include_router(affaire_routes.router)
        app.include_router(audience_routes.router)
        app.include_router(honoraire_routes.router)
        app.include_router(depense_affaire_routes.router)

        # Gestion locative
        app.include_router(impayes_routes.router)
        app.include_router(import_routes.router)
        app.include_router(immobilier_routes.router)
        app.include_router(arrierage_routes.router)

        # Recouvrement
        app.include_router(recouvrement_routes.router)

        @app.get("/health", tags=["system"])
        async def health():
            return {"status": "ok", "app": APP_NAME, "version": APP_VERSION}
