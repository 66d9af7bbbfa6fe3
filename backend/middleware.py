from fastapi import Request
from jose import JWTError, jwt
from sqlalchemy.exc import SQLAlchemyError
from database import SessionLocal
from audit_logger import AuditLogger
from enums import ActionType, EntityType
import models
import logging
import time

logger = logging.getLogger("leximmo.requests")


class AuditMiddleware:
    """
    Middleware qui journalise chaque requête API (méthode, chemin, statut,
    latence, IP, user-agent) et enregistre les requêtes de modification
    ainsi que les erreurs dans audit_logs
    """

    # Endpoints jamais enregistrés en base
    IGNORE_PATHS = ["/docs", "/redoc", "/openapi.json", "/favicon.ico", "/health"]

    ENTITY_BY_PATH = [
        ("/resultat", EntityType.RESULTAT_AUDIENCE),
        ("/audiences", EntityType.AUDIENCE),
        ("/honoraires", EntityType.HONORAIRE),
        ("/contentieux/depenses", EntityType.DEPENSE_AFFAIRE),
        ("/affaires", EntityType.AFFAIRE),
        ("/actions", EntityType.ACTION_RECOUVREMENT),
        ("/arrierages", EntityType.ARRIERAGE),
        ("/paiements", EntityType.PAIEMENT_RECOUVREMENT),
        ("/recouvrement", EntityType.DOSSIER_RECOUVREMENT),
        ("/import", EntityType.SYSTEM),
        ("/impayes/alertes", EntityType.ALERTE),
        ("/impayes", EntityType.ENCAISSEMENT),
        ("/depenses", EntityType.DEPENSE),
        ("/proprietaires", EntityType.PROPRIETAIRE),
        ("/immeubles", EntityType.IMMEUBLE),
        ("/lots", EntityType.LOT),
        ("/locataires", EntityType.LOCATAIRE),
        ("/baux", EntityType.BAIL),
        ("/encaissements", EntityType.ENCAISSEMENT),
        ("/auth", EntityType.USER),
        ("/users", EntityType.USER),
    ]

    def __init__(self, app, session_factory=None):
        self.app = app
        self.session_factory = session_factory or SessionLocal

    async def __call__(self, scope, receive, send):
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request(scope, receive)

        start_time = time.time()
        status_code = 500

        # Wrapper pour capturer le code de réponse
        async def send_wrapper(message):
            nonlocal status_code
            if message["type"] == "http.response.start":
                status_code = message["status"]
            await send(message)

        try:
            await self.app(scope, receive, send_wrapper)
        except Exception:
            # L'exception remonte au gestionnaire global, la requête est journalisée en 500
            status_code = 500
            raise
        finally:
            process_time_ms = round((time.time() - start_time) * 1000, 2)
            self._log_console(request, status_code, process_time_ms)
            self._log_request(request, status_code, process_time_ms)

    def _log_console(self, request: Request, status_code: int, process_time_ms: float):
        client_ip = request.client.host if request.client else "-"
        user_agent = request.headers.get("user-agent", "-")
        level = logging.ERROR if status_code >= 500 else logging.WARNING if status_code >= 400 else logging.INFO
        logger.log(
            level, "%s %s %s %.2fms ip=%s ua=%s",
            request.method, request.url.path, status_code, process_time_ms, client_ip, user_agent
        )

    def _log_request(self, request: Request, status_code: int, process_time_ms: float):
        """
        Enregistre la requête dans audit_logs si elle doit l'être
        """
        if any(request.url.path.startswith(path) for path in self.IGNORE_PATHS):
            return

        # Les consultations réussies ne sont pas enregistrées
        if request.method in ("GET", "HEAD", "OPTIONS") and status_code < 400:
            return

        db = self.session_factory()
        try:
            user_id = self._get_user_id(db, request)

            description = f"{request.method} {request.url.path}"
            if status_code >= 400:
                description += f" - Erreur {status_code}"

            details = {
                "query_params": str(request.query_params) if request.query_params else None,
            }

            AuditLogger.log_action(
                db=db,
                action=self._get_action(request.method, status_code),
                entity_type=self._get_entity_from_path(request.url.path),
                description=description,
                user_id=user_id,
                details=details,
                request=request,
                status_code=status_code,
                process_time_ms=process_time_ms
            )
        except SQLAlchemyError as e:
            logger.error("Erreur lors de l'enregistrement de la requête: %s", e)
        finally:
            db.close()

    def _get_user_id(self, db, request: Request):
        auth_header = request.headers.get("authorization")
        if not auth_header or not auth_header.startswith("Bearer "):
            return None

        from auth import SECRET_KEY, ALGORITHM

        token = auth_header.split(" ", 1)[1]
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError:
            return None

        email = payload.get("sub")
        if not email:
            return None
        user = db.query(models.User).filter(models.User.email == email).first()
        return user.id if user else None

    def _get_action(self, method: str, status_code: int) -> ActionType:
        """Convertit la méthode HTTP en type d'action"""
        if status_code == 403:
            return ActionType.ACCESS_DENIED
        if status_code >= 500:
            return ActionType.ERROR
        method_mapping = {
            "GET": ActionType.READ,
            "POST": ActionType.CREATE,
            "PUT": ActionType.UPDATE,
            "PATCH": ActionType.UPDATE,
            "DELETE": ActionType.DELETE
        }
        return method_mapping.get(method, ActionType.READ)

    def _get_entity_from_path(self, path: str) -> EntityType:
        """Détermine le type d'entité à partir du chemin"""
        for fragment, entity_type in self.ENTITY_BY_PATH:
            if fragment in path:
                return entity_type
        return EntityType.SYSTEM
