#!/usr/bin/env python3
"""
Génère les modèles d'import et des fichiers Excel de test (dont une ligne invalide par feuille)
Usage: python dev/scripts/create_test_excel_files.py [dossier_sortie]
"""
import os
import sys

sys.path.append(os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))))

from openpyxl import Workbook
from openpyxl.styles import Font

from services.template_service import (
    IMPORT_SCHEMAS, ORDRE_IMPORT, generer_template, generer_template_complet, nom_fichier_template
)

# Lignes de test: la dernière de chaque feuille est volontairement invalide
DONNEES_TEST = {
    "PROPRIETAIRES": [
        ["Diallo Moussa", "+221 77 111 22 33", "moussa.diallo@test.com", "12 Avenue Bourguiba, Dakar"],
        ["Sow Aminata", "+221 77 444 55 66", "aminata.sow@test.com", "5 Rue Carnot, Dakar"],
        [None, "+221 77 000 00 00", "sans.nom@test.com", "Nom manquant"],
    ],
    "IMMEUBLES": [
        ["Residence Les Almadies", "Route des Almadies, Dakar", "Diallo Moussa", 7.5, "Vue mer"],
        ["Immeuble Sandaga", "Avenue Lamine Gueye, Dakar", "Sow Aminata", 5, None],
        ["Immeuble Fantome", "Rue inconnue", "Proprietaire Inconnu", 150, None],
    ],
    "LOCATAIRES": [
        ["Ndiaye", "Fatou", "+221 76 123 45 67", "fatou.ndiaye@test.com", "1990-05-12"],
        ["Fall", "Ibrahima", "+221 70 987 65 43", None, "1985-11-30"],
        ["Ba", "Omar", "abc", "email-invalide", "12/05/1990"],
    ],
    "LOTS": [
        ["A101", "Residence Les Almadies", "F3", 1, 250000, "Ndiaye Fatou", "OCCUPE"],
        ["B02", "Immeuble Sandaga", "MAGASIN", 0, 400000, None, "LIBRE"],
        ["C303", "Residence Les Almadies", "INVALID", 99, -10, None, None],
    ],
}


def ecrire_classeur_test(chemin: str):
    wb = Workbook()
    ws = wb.active
    for index, kind in enumerate(ORDRE_IMPORT):
        if index > 0:
            ws = wb.create_sheet()
        schema = IMPORT_SCHEMAS[kind]
        ws.title = schema["sheet"]
        ws.append(schema["colonnes"])
        for cell in ws[1]:
            cell.font = Font(bold=True)
        for ligne in DONNEES_TEST[kind.value]:
            ws.append(ligne)
    wb.save(chemin)


def create_test_excel_files(dossier: str):
    os.makedirs(dossier, exist_ok=True)

    for kind in ORDRE_IMPORT:
        chemin = os.path.join(dossier, nom_fichier_template(kind))
        with open(chemin, "wb") as f:
            f.write(generer_template(kind))
        print(f"Modele cree: {chemin}")

    chemin = os.path.join(dossier, nom_fichier_template())
    with open(chemin, "wb") as f:
        f.write(generer_template_complet())
    print(f"Modele cree: {chemin}")

    chemin = os.path.join(dossier, "import_test_complet.xlsx")
    ecrire_classeur_test(chemin)
    print(f"Fichier de test cree: {chemin} (une ligne invalide par feuille)")


if __name__ == "__main__":
    try:
        create_test_excel_files(sys.argv[1] if len(sys.argv) > 1 else "test_excel_files")
    except OSError as e:
        print(f"Erreur: {e}")
        sys.exit(1)
