"""
Enums partagés pour l'application LexImmo
Centralisation de toutes les énumérations pour éviter la duplication
"""
import enum


class AppRole(str, enum.Enum):
    """Rôles applicatifs des utilisateurs"""
    admin = "admin"
    collaborateur = "collaborateur"
    compta = "compta"


class ActionType(str, enum.Enum):
    """Types d'actions pour l'audit logging"""
    CREATE = "CREATE"
    READ = "READ"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    LOGIN = "LOGIN"
    ACCESS_DENIED = "ACCESS_DENIED"
    IMPORT = "IMPORT"
    ERROR = "ERROR"


class EntityType(str, enum.Enum):
    """Types d'entités dans l'application"""
    USER = "USER"
    AFFAIRE = "AFFAIRE"
    AUDIENCE = "AUDIENCE"
    RESULTAT_AUDIENCE = "RESULTAT_AUDIENCE"
    PROPRIETAIRE = "PROPRIETAIRE"
    IMMEUBLE = "IMMEUBLE"
    LOT = "LOT"
    LOCATAIRE = "LOCATAIRE"
    BAIL = "BAIL"
    ENCAISSEMENT = "ENCAISSEMENT"
    DEPENSE = "DEPENSE"
    ALERTE = "ALERTE"
    DOSSIER_RECOUVREMENT = "DOSSIER_RECOUVREMENT"
    ACTION_RECOUVREMENT = "ACTION_RECOUVREMENT"
    PAIEMENT_RECOUVREMENT = "PAIEMENT_RECOUVREMENT"
    ARRIERAGE = "ARRIERAGE"
    PAIEMENT_ARRIERAGE = "PAIEMENT_ARRIERAGE"
    HONORAIRE = "HONORAIRE"
    DEPENSE_AFFAIRE = "DEPENSE_AFFAIRE"
    SYSTEM = "SYSTEM"


# ==================== CONTENTIEUX ====================

class StatutAffaire(str, enum.Enum):
    """Statuts d'une affaire"""
    ACTIVE = "ACTIVE"
    CLOTUREE = "CLOTUREE"
    RADIEE = "RADIEE"


class StatutAudience(str, enum.Enum):
    """Statuts d'une audience (dérivés de la date et du résultat)"""
    A_VENIR = "A_VENIR"
    PASSEE_NON_RENSEIGNEE = "PASSEE_NON_RENSEIGNEE"
    RENSEIGNEE = "RENSEIGNEE"


class TypeAudience(str, enum.Enum):
    """Types d'audiences"""
    MISE_EN_ETAT = "MISE_EN_ETAT"
    PLAIDOIRIE = "PLAIDOIRIE"
    REFERE = "REFERE"
    EVOCATION = "EVOCATION"
    CONCILIATION = "CONCILIATION"
    MEDIATION = "MEDIATION"
    AUTRE = "AUTRE"


class TypeResultatAudience(str, enum.Enum):
    """Issue d'une audience"""
    RENVOI = "RENVOI"
    RADIATION = "RADIATION"
    DELIBERE = "DELIBERE"


class TypeDepenseAffaire(str, enum.Enum):
    """Frais engagés sur une affaire"""
    FRAIS_HUISSIER = "FRAIS_HUISSIER"
    FRAIS_GREFFE = "FRAIS_GREFFE"
    TIMBRES_FISCAUX = "TIMBRES_FISCAUX"
    FRAIS_COURRIER = "FRAIS_COURRIER"
    FRAIS_DEPLACEMENT = "FRAIS_DEPLACEMENT"
    FRAIS_EXPERTISE = "FRAIS_EXPERTISE"
    AUTRES = "AUTRES"


# ==================== GESTION LOCATIVE ====================

class TypeLot(str, enum.Enum):
    """Types de lots"""
    STUDIO = "STUDIO"
    F1 = "F1"
    F2 = "F2"
    F3 = "F3"
    F4 = "F4"
    F5 = "F5"
    MAGASIN = "MAGASIN"
    BUREAU = "BUREAU"
    AUTRE = "AUTRE"


class StatutLot(str, enum.Enum):
    """Statuts d'occupation d'un lot"""
    LIBRE = "LIBRE"
    OCCUPE = "OCCUPE"
    MAINTENANCE = "MAINTENANCE"


class StatutBail(str, enum.Enum):
    """Statuts d'un bail"""
    ACTIF = "ACTIF"
    RESILIE = "RESILIE"
    EXPIRE = "EXPIRE"


class ModePaiement(str, enum.Enum):
    """Modes de paiement acceptés"""
    ESPECES = "ESPECES"
    VIREMENT = "VIREMENT"
    CHEQUE = "CHEQUE"
    MOBILE_MONEY = "MOBILE_MONEY"


class StatutImpaye(str, enum.Enum):
    """Situation d'un loyer sur un mois"""
    IMPAYE = "IMPAYE"
    PARTIEL = "PARTIEL"
    REGLE = "REGLE"


class TypeAlerte(str, enum.Enum):
    """Types d'alertes"""
    LOYER_IMPAYE = "LOYER_IMPAYE"
    AUDIENCE = "AUDIENCE"
    ENROLEMENT = "ENROLEMENT"


class PrioriteAlerte(str, enum.Enum):
    """Priorités d'alerte"""
    BASSE = "BASSE"
    MOYENNE = "MOYENNE"
    HAUTE = "HAUTE"


class StatutArrierage(str, enum.Enum):
    """Statuts d'un arriéré de loyers"""
    EN_COURS = "EN_COURS"
    SOLDE = "SOLDE"


class ImportEntityType(str, enum.Enum):
    """Entités importables depuis un fichier Excel"""
    PROPRIETAIRES = "PROPRIETAIRES"
    IMMEUBLES = "IMMEUBLES"
    LOCATAIRES = "LOCATAIRES"
    LOTS = "LOTS"


# ==================== RECOUVREMENT ====================

class StatutRecouvrement(str, enum.Enum):
    """Statuts d'un dossier de recouvrement"""
    EN_COURS = "EN_COURS"
    CLOTURE = "CLOTURE"
    ABANDONNE = "ABANDONNE"


class TypeActionRecouvrement(str, enum.Enum):
    """Démarches menées sur un dossier de recouvrement"""
    APPEL_TELEPHONIQUE = "APPEL_TELEPHONIQUE"
    COURRIER = "COURRIER"
    LETTRE_RELANCE = "LETTRE_RELANCE"
    MISE_EN_DEMEURE = "MISE_EN_DEMEURE"
    COMMANDEMENT_PAYER = "COMMANDEMENT_PAYER"
    ASSIGNATION = "ASSIGNATION"
    REQUETE = "REQUETE"
    AUDIENCE_PROCEDURE = "AUDIENCE_PROCEDURE"
    AUTRE = "AUTRE"
