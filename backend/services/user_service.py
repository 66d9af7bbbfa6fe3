"""
Service de gestion des utilisateurs et de leurs rôles

Le cabinet doit toujours conserver au moins un administrateur actif.
"""
import logging
from typing import Optional, List

from fastapi import Request
from sqlalchemy.orm import Session

from audit_logger import AuditLogger, get_model_data
from auth import get_password_hash
from base_crud import BaseCRUDService
from constants import get_error_message
from enums import ActionType, AppRole, EntityType
from error_handlers import BusinessRuleError
from models import User, UserRole
import schemas

logger = logging.getLogger(__name__)


class UserService(BaseCRUDService[User, schemas.UserCreate, schemas.UserUpdate]):

    def __init__(self):
        super().__init__(User, EntityType.USER, "Utilisateur")

    def _email_disponible(self, db: Session, email: str, exclure_id: int = None):
        query = db.query(User).filter(User.email == email)
        if exclure_id is not None:
            query = query.filter(User.id != exclure_id)
        if query.first():
            raise BusinessRuleError(get_error_message("EMAIL_EXISTANT"), "EMAIL_EXISTANT", status_code=409)

    def _est_admin_actif(self, user: User) -> bool:
        return bool(user.actif) and AppRole.admin.value in user.role_names

    def _proteger_dernier_admin(self, db: Session, user: User):
        """Refuse une opération qui retirerait le dernier administrateur actif"""
        if not self._est_admin_actif(user):
            return
        autres = db.query(User).join(User.roles).filter(
            UserRole.role == AppRole.admin,
            User.actif.is_(True),
            User.id != user.id,
        ).count()
        if autres == 0:
            logger.warning("Opération refusée: %s est le dernier administrateur actif", user.email)
            raise BusinessRuleError(get_error_message("DERNIER_ADMIN"), "DERNIER_ADMIN")

    def lister(self, db: Session, role: Optional[AppRole] = None, actif: Optional[bool] = None,
               skip: int = 0, limit: int = 100) -> List[User]:
        query = db.query(User)
        if role:
            query = query.join(User.roles).filter(UserRole.role == role)
        if actif is not None:
            query = query.filter(User.actif.is_(actif))
        return query.order_by(User.email).offset(skip).limit(limit).all()

    def creer(self, db: Session, data: schemas.UserCreate, user_id: int = None,
              request: Request = None) -> User:
        self._email_disponible(db, data.email)

        user = User(
            email=data.email,
            hashed_password=get_password_hash(data.password),
            nom=data.nom,
            prenom=data.prenom,
            actif=True,
            roles=[UserRole(role=role) for role in dict.fromkeys(data.roles)],
        )
        db.add(user)
        db.flush()

        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.CREATE,
            entity_type=EntityType.USER,
            entity_id=user.id,
            user_id=user_id,
            description=f"Création de l'utilisateur {user.email}",
            after_data={**get_model_data(user), "roles": sorted(user.role_names)},
            request=request
        )
        db.commit()
        db.refresh(user)
        logger.info("Utilisateur %s créé (rôles %s)", user.email, sorted(user.role_names))
        return user

    def modifier(self, db: Session, target_id: int, data: schemas.UserUpdate,
                 user_id: int = None, request: Request = None) -> User:
        user = self.get_or_404(db, target_id)
        valeurs = data.model_dump(exclude_unset=True)

        if "email" in valeurs:
            self._email_disponible(db, valeurs["email"], exclure_id=user.id)
        if valeurs.get("actif") is False:
            self._proteger_dernier_admin(db, user)
        if "password" in valeurs:
            valeurs["hashed_password"] = get_password_hash(valeurs.pop("password"))

        return self.update(db, user, valeurs, user_id=user_id, request=request)

    def supprimer(self, db: Session, target_id: int, user_id: int = None, request: Request = None) -> User:
        user = self.get_or_404(db, target_id)
        self._proteger_dernier_admin(db, user)
        return self.delete(db, target_id, user_id=user_id, request=request)

    # ---------- rôles ----------

    def attribuer_role(self, db: Session, target_id: int, role: AppRole,
                       user_id: int = None, request: Request = None) -> User:
        user = self.get_or_404(db, target_id)
        if role.value in user.role_names:
            raise BusinessRuleError(
                get_error_message("ROLE_DEJA_ATTRIBUE"), "ROLE_DEJA_ATTRIBUE",
                details={"role": role.value}, status_code=409
            )

        user.roles.append(UserRole(role=role))
        db.flush()
        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.UPDATE,
            entity_type=EntityType.USER,
            entity_id=user.id,
            user_id=user_id,
            description=f"Attribution du rôle {role.value} à {user.email}",
            after_data={"roles": sorted(user.role_names)},
            request=request
        )
        db.commit()
        db.refresh(user)
        return user

    def retirer_role(self, db: Session, target_id: int, role: AppRole,
                     user_id: int = None, request: Request = None) -> User:
        user = self.get_or_404(db, target_id)
        attribution = next((r for r in user.roles if r.role == role), None)
        if attribution is None:
            raise BusinessRuleError(
                get_error_message("ROLE_NON_ATTRIBUE"), "ROLE_NON_ATTRIBUE",
                details={"role": role.value}
            )
        if role == AppRole.admin:
            self._proteger_dernier_admin(db, user)

        avant = sorted(user.role_names)
        user.roles.remove(attribution)
        db.flush()
        AuditLogger.log_crud_action(
            db=db,
            action=ActionType.UPDATE,
            entity_type=EntityType.USER,
            entity_id=user.id,
            user_id=user_id,
            description=f"Retrait du rôle {role.value} à {user.email}",
            before_data={"roles": avant},
            after_data={"roles": sorted(user.role_names)},
            request=request
        )
        db.commit()
        db.refresh(user)
        return user


user_service = UserService()
