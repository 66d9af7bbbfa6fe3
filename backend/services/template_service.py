"""
Modèles Excel d'import pour la gestion locative
"""
import logging
from io import BytesIO

from openpyxl import Workbook
from openpyxl.styles import Font
from openpyxl.utils import get_column_letter

from enums import ImportEntityType, TypeLot

logger = logging.getLogger(__name__)

TYPES_LOT = [t.value for t in TypeLot]
STATUTS_LOT_IMPORT = ["LIBRE", "OCCUPE"]

# Schéma d'import par type d'entité: colonnes ordonnées, obligatoires, énumérées
IMPORT_SCHEMAS = {
    ImportEntityType.PROPRIETAIRES: {
        "sheet": "Proprietaires",
        "colonnes": ["nom", "telephone", "email", "adresse"],
        "obligatoires": ["nom"],
        "enums": {},
        "exemple": ["Dupont Jean", "0123456789", "jean.dupont@email.com", "123 Rue de la Paix, Abidjan"],
    },
    ImportEntityType.IMMEUBLES: {
        "sheet": "Immeubles",
        "colonnes": ["nom", "adresse", "proprietaire_nom", "taux_commission", "notes"],
        "obligatoires": ["nom", "adresse", "proprietaire_nom"],
        "enums": {},
        "exemple": ["Résidence Les Jardins", "789 Boulevard Latrille, Abidjan", "Dupont Jean", 5, "Immeuble moderne"],
    },
    ImportEntityType.LOCATAIRES: {
        "sheet": "Locataires",
        "colonnes": ["nom", "prenom", "telephone", "email", "date_naissance"],
        "obligatoires": ["nom"],
        "enums": {},
        "exemple": ["Durand", "Pierre", "0111111111", "pierre.durand@email.com", "1985-03-15"],
    },
    ImportEntityType.LOTS: {
        "sheet": "Lots",
        "colonnes": ["numero", "immeuble_nom", "type", "etage", "loyer_mensuel", "locataire_nom", "statut"],
        "obligatoires": ["numero", "immeuble_nom"],
        "enums": {"type": TYPES_LOT, "statut": STATUTS_LOT_IMPORT},
        "exemple": ["A101", "Résidence Les Jardins", "F3", 1, 150000, "Durand Pierre", "OCCUPE"],
    },
}

# Ordre de dépendance pour l'import multi-feuilles
ORDRE_IMPORT = [
    ImportEntityType.PROPRIETAIRES,
    ImportEntityType.IMMEUBLES,
    ImportEntityType.LOCATAIRES,
    ImportEntityType.LOTS,
]


def get_schema(kind) -> dict:
    try:
        return IMPORT_SCHEMAS[ImportEntityType(kind)]
    except ValueError:
        raise ValueError(f"Type d'entité inconnu: {kind}. Valeurs acceptées: "
                         f"{', '.join(k.value for k in ImportEntityType)}")


def _remplir_feuille(ws, schema: dict):
    ws.title = schema["sheet"]
    ws.append(schema["colonnes"])
    ws.append(schema["exemple"])

    for cell in ws[1]:
        cell.font = Font(bold=True)

    for col_idx, colonne in enumerate(schema["colonnes"], start=1):
        ws.column_dimensions[get_column_letter(col_idx)].width = max(14, len(colonne) + 4)


def _to_bytes(wb: Workbook) -> bytes:
    bio = BytesIO()
    wb.save(bio)
    return bio.getvalue()


def generer_template(kind) -> bytes:
    """Classeur d'une feuille: en-têtes en gras et une ligne d'exemple"""
    schema = get_schema(kind)
    wb = Workbook()
    _remplir_feuille(wb.active, schema)
    logger.info("Modèle Excel généré pour %s", schema["sheet"])
    return _to_bytes(wb)


def generer_template_complet() -> bytes:
    """Classeur multi-feuilles, dans l'ordre d'import"""
    wb = Workbook()
    ws = wb.active
    for index, kind in enumerate(ORDRE_IMPORT):
        if index > 0:
            ws = wb.create_sheet()
        _remplir_feuille(ws, IMPORT_SCHEMAS[kind])
    logger.info("Modèle Excel multi-feuilles généré")
    return _to_bytes(wb)


def nom_fichier_template(kind=None) -> str:
    if kind is None:
        return "modele_import_complet.xlsx"
    return f"modele_import_{get_schema(kind)['sheet'].lower()}.xlsx"
