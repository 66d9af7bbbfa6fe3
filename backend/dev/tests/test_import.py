"""
LexImmo - Import Excel ligne par ligne et modèles téléchargeables
Run: pytest backend/dev/tests/test_import.py -v
"""
from io import BytesIO

import pytest
from openpyxl import Workbook, load_workbook

from constants import XLSX_MEDIA_TYPE
from models import Immeuble, Lot, Proprietaire
from enums import StatutLot, TypeLot

IMPORT = "/api/immobilier/import"

EN_TETES = {
    "Proprietaires": ["nom", "telephone", "email", "adresse"],
    "Immeubles": ["nom", "adresse", "proprietaire_nom", "taux_commission", "notes"],
    "Locataires": ["nom", "prenom", "telephone", "email", "date_naissance"],
    "Lots": ["numero", "immeuble_nom", "type", "etage", "loyer_mensuel", "locataire_nom", "statut"],
}


def classeur(**feuilles) -> bytes:
    """Classeur en mémoire: une feuille par argument, en-têtes standards"""
    wb = Workbook()
    wb.remove(wb.active)
    for titre, lignes in feuilles.items():
        ws = wb.create_sheet(titre)
        ws.append(EN_TETES[titre])
        for ligne in lignes:
            ws.append(ligne)
    flux = BytesIO()
    wb.save(flux)
    return flux.getvalue()


def envoyer(client, headers, contenu, entite=None, nom="import.xlsx"):
    url = f"{IMPORT}/{entite}" if entite else IMPORT
    return client.post(url, files={"file": (nom, contenu, XLSX_MEDIA_TYPE)}, headers=headers)


@pytest.fixture
def immeuble(db):
    proprietaire = Proprietaire(nom="Diallo Moussa")
    db.add(proprietaire)
    db.flush()
    immeuble = Immeuble(reference="IMM-001", nom="Residence Les Almadies", adresse="Route des Almadies",
                        proprietaire_id=proprietaire.id)
    db.add(immeuble)
    db.commit()
    return immeuble


class TestImportLots:
    """Chaque ligne est enregistrée ou rejetée indépendamment"""

    def test_ligne_invalide_isolee(self, client, collab_headers, db, immeuble):
        contenu = classeur(Lots=[
            ["A101", "Residence Les Almadies", "F3", 1, 250000, None, None],
            ["A102", "Residence Les Almadies", "INVALID", 1, 200000, None, None],
            ["A103", "residence les almadies", None, 2, None, None, None],
        ])
        response = envoyer(client, collab_headers, contenu, "lots")
        assert response.status_code == 200, response.text
        data = response.json()

        assert data["entite"] == "LOTS"
        assert (data["totalLignes"], data["lignesReussies"], data["lignesEchouees"]) == (3, 2, 1)

        echec = [r for r in data["resultats"] if not r["succes"]]
        assert echec[0]["ligne"] == 3
        assert [e["champ"] for e in echec[0]["erreurs"]] == ["type"]
        assert "INVALID" in echec[0]["erreurs"][0]["message"]

        db.expire_all()
        lots = {lot.numero: lot for lot in db.query(Lot).all()}
        assert set(lots) == {"A101", "A103"}
        assert lots["A101"].type == TypeLot.F3
        assert lots["A103"].type == TypeLot.AUTRE
        assert lots["A103"].statut == StatutLot.LIBRE

    def test_champ_obligatoire_manquant(self, client, collab_headers, immeuble):
        contenu = classeur(Lots=[
            ["A101", "Residence Les Almadies", "F2", 0, 100000, None, "LIBRE"],
            [None, "Residence Les Almadies", "F2", 0, 100000, None, None],
        ])
        data = envoyer(client, collab_headers, contenu, "lots").json()
        echec = data["resultats"][1]
        assert echec["succes"] is False
        assert echec["ligne"] == 3
        assert echec["erreurs"] == [{"champ": "numero", "message": "Le champ 'numero' est obligatoire"}]

    def test_immeuble_introuvable_et_doublon(self, client, collab_headers, immeuble):
        contenu = classeur(Lots=[
            ["B01", "Immeuble Fantome", "F1", 0, 50000, None, None],
            ["B02", "Residence Les Almadies", "F1", 0, 50000, None, None],
            ["B02", "Residence Les Almadies", "F1", 0, 50000, None, None],
        ])
        data = envoyer(client, collab_headers, contenu, "lots").json()
        assert [r["succes"] for r in data["resultats"]] == [False, True, False]
        assert data["resultats"][0]["erreurs"][0]["champ"] == "immeuble_nom"
        assert data["resultats"][2]["erreurs"][0]["champ"] == "numero"


class TestImportComplet:
    """Feuilles importées dans l'ordre des dépendances"""

    def test_classeur_multi_feuilles(self, client, collab_headers, db):
        contenu = classeur(
            Lots=[["A101", "Immeuble Sandaga", "MAGASIN", 0, 400000, "Ndiaye Fatou", None]],
            Locataires=[["Ndiaye", "Fatou", "+221 76 123 45 67", None, "1990-05-12"]],
            Immeubles=[["Immeuble Sandaga", "Avenue Lamine Gueye", "Sow Aminata", 5, None]],
            Proprietaires=[["Sow Aminata", None, "aminata.sow@test.com", None]],
        )
        response = envoyer(client, collab_headers, contenu)
        assert response.status_code == 200, response.text
        data = response.json()
        assert data["lignesReussies"] == 4
        assert data["lignesEchouees"] == 0
        assert set(data["entites"]) == {"PROPRIETAIRES", "IMMEUBLES", "LOCATAIRES", "LOTS"}

        db.expire_all()
        lot = db.query(Lot).one()
        assert lot.statut == StatutLot.OCCUPE
        assert lot.locataire.nom == "Ndiaye"
        assert lot.immeuble.reference.startswith("IMM")

    def test_aucune_feuille_reconnue(self, client, collab_headers):
        wb = Workbook()
        wb.active.title = "Divers"
        wb.active.append(["colonne"])
        wb.active.append(["valeur"])
        flux = BytesIO()
        wb.save(flux)
        response = envoyer(client, collab_headers, flux.getvalue())
        assert response.status_code == 400
        assert response.json()["error_code"] == "MISSING_SHEETS"


class TestFichierEtModeles:

    def test_extension_refusee(self, client, collab_headers):
        response = envoyer(client, collab_headers, b"nom;adresse", "lots", nom="lots.csv")
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_FILE_TYPE"

    def test_fichier_illisible(self, client, collab_headers):
        response = envoyer(client, collab_headers, b"pas un classeur", "lots")
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_FILE"

    def test_entite_inconnue(self, client, collab_headers):
        response = envoyer(client, collab_headers, classeur(Lots=[]), "parkings")
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_ENTITY_TYPE"

    def test_import_interdit_en_lecture_seule(self, client, compta_headers):
        assert envoyer(client, compta_headers, classeur(Lots=[]), "lots").status_code == 403

    def test_modele_lots(self, client, compta_headers):
        response = client.get(f"{IMPORT}/template/lots", headers=compta_headers)
        assert response.status_code == 200
        assert response.headers["content-type"] == XLSX_MEDIA_TYPE
        assert "attachment" in response.headers["content-disposition"]

        ws = load_workbook(BytesIO(response.content)).active
        assert [c.value for c in ws[1]] == EN_TETES["Lots"]

    def test_modele_complet(self, client, compta_headers):
        response = client.get(f"{IMPORT}/template", headers=compta_headers)
        wb = load_workbook(BytesIO(response.content))
        assert wb.sheetnames[:4] == ["Proprietaires", "Immeubles", "Locataires", "Lots"]
