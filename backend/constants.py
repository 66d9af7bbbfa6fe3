"""
Constantes centralisées pour l'application LexImmo
Valeurs métier, configuration lue depuis l'environnement et messages standards
"""
import os
from dotenv import load_dotenv

load_dotenv()

# ==================== CONFIGURATION GÉNÉRALE ====================

APP_NAME = "LexImmo"
APP_VERSION = "1.0.0"
APP_DESCRIPTION = "Gestion de cabinet: contentieux, recouvrement et gestion locative"

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

CORS_ORIGINS = [
    origin.strip()
    for origin in os.getenv(
        "CORS_ORIGINS",
        "http://localhost:5173,http://127.0.0.1:5173,http://localhost:8080"
    ).split(",")
    if origin.strip()
]

# ==================== CONFIGURATION DE SÉCURITÉ ====================

JWT_ALGORITHM = "HS256"
DEFAULT_ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "480"))

MIN_PASSWORD_LENGTH = 8

# ==================== CONTENTIEUX ====================

# Le rappel d'enrôlement tombe 4 jours ouvrables avant l'audience
JOURS_OUVRABLES_RAPPEL_ENROLEMENT = 4

FORMAT_HEURE_AUDIENCE = r'^([01]\d|2[0-3]):[0-5]\d$'

# ==================== GESTION LOCATIVE ====================

# Jour du mois auquel le loyer est exigible
JOUR_ECHEANCE_DEFAUT = int(os.getenv("JOUR_ECHEANCE_DEFAUT", "5"))

# Politique d'exclusion des baux inactifs:
#   mois_suivant -> le bail compte encore pour le mois de sa fin
#   immediat     -> le bail ne compte plus dès le mois de sa fin
POLITIQUES_BAIL_INACTIF = ("mois_suivant", "immediat")
POLITIQUE_BAIL_INACTIF = os.getenv("POLITIQUE_BAIL_INACTIF", "mois_suivant")
if POLITIQUE_BAIL_INACTIF not in POLITIQUES_BAIL_INACTIF:
    raise ValueError(
        f"POLITIQUE_BAIL_INACTIF invalide: {POLITIQUE_BAIL_INACTIF!r} "
        f"(valeurs acceptées: {', '.join(POLITIQUES_BAIL_INACTIF)})"
    )

NB_MOIS_EVOLUTION_IMPAYES = 6

# Priorité des alertes d'impayés selon le retard (en jours)
SEUIL_PRIORITE_HAUTE_JOURS = 60
SEUIL_PRIORITE_MOYENNE_JOURS = 30

ANNEE_MIN = 2000
ANNEE_MAX = 2100

MIN_FLOOR = -5
MAX_FLOOR = 50

# ==================== IMPORT EXCEL ====================

MAX_IMPORT_FILE_SIZE = 10 * 1024 * 1024  # 10 MB
ALLOWED_IMPORT_EXTENSIONS = {".xlsx"}
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"

# ==================== CONFIGURATION API ====================

MAX_PAGE_SIZE = 100

# ==================== PATTERNS DE VALIDATION ====================

VALIDATION_PATTERNS = {
    "email": r'^[^\s@]+@[^\s@]+\.[^\s@]+$',
    "telephone": r'^[0-9+\-\s()]{8,20}$',
    "date_iso": r'^\d{4}-\d{2}-\d{2}$',
    "mois": r'^\d{4}-\d{2}$',
}

# ==================== MESSAGES D'ERREUR STANDARDS ====================

ERROR_MESSAGES = {
    # Authentification
    "INVALID_CREDENTIALS": "Email ou mot de passe incorrect",
    "ACCOUNT_DISABLED": "Compte désactivé",
    "TOKEN_INVALID": "Token invalide",

    # Permissions
    "ACCESS_DENIED": "Accès refusé",
    "INSUFFICIENT_PERMISSIONS": "Permissions insuffisantes",
    "RESOURCE_NOT_FOUND": "Ressource non trouvée",

    # Métier
    "DUPLICATE_ENTRY": "Cette valeur existe déjà",
    "FOREIGN_KEY_VIOLATION": "Référence invalide",
    "PARENT_ROW_CONSTRAINT": "Impossible de supprimer: des éléments dépendants existent",
    "RESULTAT_EXISTANT": "Cette audience a déjà un résultat",
    "RENVOI_SANS_DATE": "La nouvelle date est obligatoire pour un renvoi",
    "PAIEMENT_SUPERIEUR_SOLDE": "Le montant du paiement dépasse le solde restant",
    "PERIODE_INVALIDE": "La date de début doit être antérieure à la date de fin",
    "CHEVAUCHEMENT_ARRIERAGE": "Un arriéré existe déjà sur une période qui chevauche celle-ci",
    "ARRIERAGE_SOLDE": "Cet arriéré est déjà soldé",
    "PAIEMENT_SUPERIEUR_RESTANT": "Le montant du paiement dépasse le montant restant dû",
    "MONTANT_DU_INFERIEUR_PAYE": "Le montant dû ne peut pas être inférieur au montant déjà payé",
    "ENCAISSEMENT_SUPERIEUR_FACTURE": "Le montant encaissé ne peut pas dépasser le montant facturé",
    "ECHEANCE_AVANT_ACTION": "L'échéance ne peut pas précéder la date de l'action",

    # Utilisateurs
    "EMAIL_EXISTANT": "Un utilisateur avec cet email existe déjà",
    "ROLE_DEJA_ATTRIBUE": "Ce rôle est déjà attribué à l'utilisateur",
    "ROLE_NON_ATTRIBUE": "L'utilisateur n'a pas ce rôle",
    "DERNIER_ADMIN": "Impossible de retirer le dernier administrateur actif",

    # Fichiers
    "FILE_TOO_LARGE": "Fichier trop volumineux",
    "INVALID_FILE_TYPE": "Type de fichier non autorisé",
    "EMPTY_FILE": "Le fichier Excel est vide",
}


def get_error_message(error_code: str, default: str = "Une erreur est survenue") -> str:
    """
    Récupère un message d'erreur standardisé
    """
    return ERROR_MESSAGES.get(error_code, default)
