"""
Script pour créer un administrateur
Promeut un utilisateur existant ou en crée un nouveau avec le rôle admin
"""
import sys
import os
import argparse
from getpass import getpass

# Ajout du chemin pour les imports
sys.path.append(os.path.dirname(os.path.abspath(__file__)))

from sqlalchemy.exc import SQLAlchemyError

from database import SessionLocal, engine
from models import Base, User, UserRole
from enums import AppRole
from auth import get_password_hash
from constants import MIN_PASSWORD_LENGTH


def ask_password() -> str:
    while True:
        password = getpass(f"   Mot de passe ({MIN_PASSWORD_LENGTH} caractères min): ")
        if len(password) >= MIN_PASSWORD_LENGTH:
            break
        print(f"   [ERROR] Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères")

    if password != getpass("   Confirmer le mot de passe: "):
        raise ValueError("Les mots de passe ne correspondent pas")
    return password


def create_super_admin(email: str = None) -> User:
    """Crée l'utilisateur si besoin et lui ajoute le rôle admin"""
    print("=== CRÉATION ADMINISTRATEUR ===")

    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        email = (email or input("   Email de l'administrateur: ")).strip().lower()
        if not email:
            raise ValueError("Email requis")

        user = db.query(User).filter(User.email == email).first()
        if user:
            print(f"   [OK] Utilisateur trouvé: {user.email}")
        else:
            print("   [INFO] Utilisateur non trouvé, création d'un nouveau compte...")
            user = User(
                email=email,
                nom=input("   Nom: ").strip() or None,
                prenom=input("   Prénom: ").strip() or None,
                hashed_password=get_password_hash(ask_password()),
                actif=True
            )
            db.add(user)
            db.flush()

        if AppRole.admin.value in user.role_names:
            print("   [INFO] Cet utilisateur est déjà administrateur")
        else:
            db.add(UserRole(user_id=user.id, role=AppRole.admin))

        db.commit()
        db.refresh(user)
        print(f"   [SUCCESS] {user.email} - rôles: {', '.join(sorted(user.role_names))}")
        return user

    except SQLAlchemyError:
        db.rollback()
        raise
    finally:
        db.close()


def list_existing_admins():
    """Liste les administrateurs existants"""
    print("=== LISTE DES ADMINISTRATEURS ===")

    db = SessionLocal()
    try:
        admins = db.query(User).join(UserRole).filter(UserRole.role == AppRole.admin).all()
        if not admins:
            print("Aucun administrateur trouvé.")
            return

        for admin in admins:
            print(f"ID: {admin.id}")
            print(f"Email: {admin.email}")
            print(f"Actif: {'Oui' if admin.actif else 'Non'}")
            print(f"Créé le: {admin.created_at}")
            print("-" * 40)
    finally:
        db.close()


def main():
    """Point d'entrée principal"""
    parser = argparse.ArgumentParser(description='Gestion des administrateurs')
    parser.add_argument('--list', action='store_true', help='Liste les admins existants')
    parser.add_argument('--email', help="Email de l'administrateur à créer")

    args = parser.parse_args()

    try:
        if args.list:
            list_existing_admins()
        else:
            create_super_admin(args.email)
    except (ValueError, SQLAlchemyError) as e:
        print(f"\n[ERROR] Erreur lors de la création: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
