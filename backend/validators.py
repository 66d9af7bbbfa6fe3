"""
Validateurs réutilisables pour l'application LexImmo
Partagés entre les schémas Pydantic et l'import Excel
"""
import re
import datetime
from decimal import Decimal, InvalidOperation
from typing import Optional

from constants import (
    VALIDATION_PATTERNS, FORMAT_HEURE_AUDIENCE, MIN_FLOOR, MAX_FLOOR,
    ANNEE_MIN, ANNEE_MAX, MIN_PASSWORD_LENGTH
)


class CommonValidators:
    """Validateurs communs utilisés dans plusieurs schémas"""

    @staticmethod
    def validate_name(name: str, field_name: str = "nom") -> str:
        """
        Valide un nom (non vide, espaces retirés)
        """
        if name is None or len(str(name).strip()) == 0:
            raise ValueError(f'Le {field_name} ne peut pas être vide')
        return str(name).strip()

    @staticmethod
    def validate_password(password: str) -> str:
        """
        Valide la complexité du mot de passe
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValueError(f'Le mot de passe doit contenir au moins {MIN_PASSWORD_LENGTH} caractères')
        if not re.search(r'[A-Z]', password):
            raise ValueError('Le mot de passe doit contenir au moins une majuscule')
        if not re.search(r'[a-z]', password):
            raise ValueError('Le mot de passe doit contenir au moins une minuscule')
        if not re.search(r'[0-9]', password):
            raise ValueError('Le mot de passe doit contenir au moins un chiffre')
        return password

    @staticmethod
    def validate_telephone(telephone: Optional[str]) -> Optional[str]:
        """
        Valide le format du numéro de téléphone
        """
        if telephone is None or telephone == "":
            return None
        telephone = str(telephone).strip()
        if not re.match(VALIDATION_PATTERNS["telephone"], telephone):
            raise ValueError('Format de téléphone invalide')
        return telephone

    @staticmethod
    def validate_email(email: Optional[str]) -> Optional[str]:
        if email is None or email == "":
            return None
        email = str(email).strip()
        if not re.match(VALIDATION_PATTERNS["email"], email):
            raise ValueError('Format d\'email invalide')
        return email

    @staticmethod
    def validate_heure(heure: Optional[str]) -> Optional[str]:
        """
        Valide une heure au format HH:MM
        """
        if heure is None or heure == "":
            return None
        if not re.match(FORMAT_HEURE_AUDIENCE, heure):
            raise ValueError('L\'heure doit être au format HH:MM')
        return heure

    @staticmethod
    def validate_date_iso(value) -> Optional[datetime.date]:
        """
        Valide une date au format YYYY-MM-DD (ou une cellule Excel de type date)
        """
        if value is None or value == "":
            return None
        if isinstance(value, datetime.datetime):
            return value.date()
        if isinstance(value, datetime.date):
            return value
        value = str(value).strip()
        if not re.match(VALIDATION_PATTERNS["date_iso"], value):
            raise ValueError('La date doit être au format YYYY-MM-DD')
        try:
            return datetime.date.fromisoformat(value)
        except ValueError:
            raise ValueError('Date invalide')

    @staticmethod
    def validate_mois(mois: str) -> str:
        """
        Valide un mois au format YYYY-MM (année 2000..2100, mois 1..12)
        """
        if mois is None or not re.match(VALIDATION_PATTERNS["mois"], str(mois)):
            raise ValueError('Format de mois invalide. Utilisez YYYY-MM')
        annee, numero = int(mois[:4]), int(mois[5:7])
        if annee < ANNEE_MIN or annee > ANNEE_MAX:
            raise ValueError(f'L\'année doit être comprise entre {ANNEE_MIN} et {ANNEE_MAX}')
        if numero < 1 or numero > 12:
            raise ValueError('Le mois doit être compris entre 1 et 12')
        return mois


class PropertyValidators:
    """Validateurs spécifiques aux lots et immeubles"""

    @staticmethod
    def validate_floor_number(floor) -> Optional[int]:
        """
        Valide le numéro d'étage
        """
        if floor is None or floor == "":
            return None
        try:
            floor = int(floor)
        except (TypeError, ValueError):
            raise ValueError('L\'étage doit être un nombre entier')

        if floor < MIN_FLOOR:
            raise ValueError(f'L\'étage ne peut pas être inférieur à {MIN_FLOOR}')

        if floor > MAX_FLOOR:
            raise ValueError(f'L\'étage ne peut pas dépasser {MAX_FLOOR}')

        return floor


class FinancialValidators:
    """Validateurs spécifiques aux données financières"""

    @staticmethod
    def to_decimal(value, field_name: str = "montant") -> Optional[Decimal]:
        if value is None or value == "":
            return None
        try:
            nombre = Decimal(str(value).strip().replace(",", "."))
        except (InvalidOperation, ValueError):
            raise ValueError(f'Le {field_name} doit être un nombre')
        if not nombre.is_finite():
            raise ValueError(f'Le {field_name} doit être un nombre')
        return nombre

    @staticmethod
    def validate_amount(amount, field_name: str = "montant") -> Optional[Decimal]:
        """
        Valide un montant financier
        """
        amount = FinancialValidators.to_decimal(amount, field_name)
        if amount is None:
            return None
        if amount < 0:
            raise ValueError(f'Le {field_name} ne peut pas être négatif')

        # Limiter à 2 décimales pour les montants financiers
        return amount.quantize(Decimal("0.01"))

    @staticmethod
    def validate_percentage(percentage) -> Optional[Decimal]:
        """
        Valide un pourcentage
        """
        percentage = FinancialValidators.to_decimal(percentage, "pourcentage")
        if percentage is None:
            return None

        if percentage < 0 or percentage > 100:
            raise ValueError('Le pourcentage doit être entre 0 et 100')

        return percentage.quantize(Decimal("0.01"))
