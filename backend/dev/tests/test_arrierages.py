"""
LexImmo - Arriérés de loyers, paiements partiels et statistiques
Run: pytest backend/dev/tests/test_arrierages.py -v
"""
import pytest

IMMO = "/api/immobilier"
ARRIERAGES = "/api/immobilier/arrierages"


@pytest.fixture
def lot(client, collab_headers):
    immeuble = client.post(f"{IMMO}/immeubles", json={"nom": "Residence Fann", "adresse": "Rue 10, Fann"},
                           headers=collab_headers).json()
    locataire = client.post(f"{IMMO}/locataires", json={"nom": "Ndiaye", "prenom": "Fatou"},
                            headers=collab_headers).json()
    response = client.post(f"{IMMO}/lots", json={
        "immeuble_id": immeuble["id"], "numero": "B202", "locataire_id": locataire["id"]
    }, headers=collab_headers)
    assert response.status_code == 201, response.text
    return response.json()


def creer_arrierage(client, headers, lot_id, debut, fin, montant_du):
    return client.post(ARRIERAGES, json={
        "lot_id": lot_id, "periode_debut": debut, "periode_fin": fin, "montant_du": montant_du
    }, headers=headers)


def payer(client, headers, arrierage_id, montant):
    return client.post(f"{ARRIERAGES}/{arrierage_id}/paiements",
                       json={"date": "2024-02-01", "montant": montant}, headers=headers)


@pytest.fixture
def arrierage(client, collab_headers, lot):
    response = creer_arrierage(client, collab_headers, lot["id"], "2023-01-01", "2023-06-30", "500000")
    assert response.status_code == 201, response.text
    return response.json()


class TestCreation:

    def test_creation(self, arrierage):
        assert arrierage["montant_du"] == 500000.0
        assert arrierage["montant_paye"] == 0.0
        assert arrierage["montant_restant"] == 500000.0
        assert arrierage["statut"] == "EN_COURS"
        assert arrierage["lot_numero"] == "B202"
        assert arrierage["immeuble_nom"] == "Residence Fann"
        assert arrierage["locataire_nom"] == "Ndiaye Fatou"
        assert arrierage["paiements_partiels"] == []

    def test_periode_inversee(self, client, collab_headers, lot):
        response = creer_arrierage(client, collab_headers, lot["id"], "2023-06-30", "2023-01-01", "1000")
        assert response.status_code == 400
        assert "body" in response.json()["errors"]

    def test_chevauchement(self, client, collab_headers, lot, arrierage):
        # Bornes incluses: le 30 juin appartient déjà au premier arriéré
        response = creer_arrierage(client, collab_headers, lot["id"], "2023-06-30", "2023-12-31", "1000")
        assert response.status_code == 400
        assert response.json()["error_code"] == "CHEVAUCHEMENT_ARRIERAGE"

        response = creer_arrierage(client, collab_headers, lot["id"], "2022-01-01", "2024-01-01", "1000")
        assert response.json()["error_code"] == "CHEVAUCHEMENT_ARRIERAGE"

        assert creer_arrierage(client, collab_headers, lot["id"], "2023-07-01", "2023-12-31",
                               "1000").status_code == 201

    def test_lot_inexistant(self, client, collab_headers):
        response = creer_arrierage(client, collab_headers, 9999, "2023-01-01", "2023-02-01", "1000")
        assert response.status_code == 404

    def test_compta_ne_cree_pas(self, client, compta_headers, lot):
        response = creer_arrierage(client, compta_headers, lot["id"], "2023-01-01", "2023-02-01", "1000")
        assert response.status_code == 403


class TestPaiementsPartiels:
    """payé + restant = dû; soldé quand le restant tombe à zéro"""

    def test_paiements_jusqu_au_solde(self, client, collab_headers, compta_headers, arrierage):
        response = payer(client, compta_headers, arrierage["id"], "200000")
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["montant_paye"] == 200000.0
        assert data["montant_restant"] == 300000.0
        assert data["statut"] == "EN_COURS"
        assert len(data["paiements_partiels"]) == 1

        response = payer(client, collab_headers, arrierage["id"], "400000")
        assert response.status_code == 400
        assert response.json()["error_code"] == "PAIEMENT_SUPERIEUR_RESTANT"
        assert response.json()["details"]["montant_restant"] == 300000.0

        data = payer(client, collab_headers, arrierage["id"], "300000").json()
        assert data["montant_restant"] == 0.0
        assert data["statut"] == "SOLDE"

        response = payer(client, collab_headers, arrierage["id"], "1")
        assert response.status_code == 400
        assert response.json()["error_code"] == "ARRIERAGE_SOLDE"

    def test_arrierage_inexistant(self, client, collab_headers):
        assert payer(client, collab_headers, 9999, "100").status_code == 404


class TestModification:

    def test_montant_du_recalcule(self, client, collab_headers, arrierage):
        payer(client, collab_headers, arrierage["id"], "200000")
        url = f"{ARRIERAGES}/{arrierage['id']}"

        response = client.patch(url, json={"montant_du": "150000"}, headers=collab_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "MONTANT_DU_INFERIEUR_PAYE"

        response = client.patch(url, json={"montant_du": "600000"}, headers=collab_headers)
        assert response.status_code == 200
        assert response.json()["montant_restant"] == 400000.0

        data = client.patch(url, json={"montant_du": "200000"}, headers=collab_headers).json()
        assert data["montant_restant"] == 0.0
        assert data["statut"] == "SOLDE"

    def test_periode_modifiee(self, client, collab_headers, lot, arrierage):
        autre = creer_arrierage(client, collab_headers, lot["id"], "2023-07-01", "2023-12-31", "1000").json()
        url = f"{ARRIERAGES}/{autre['id']}"

        response = client.patch(url, json={"periode_debut": "2023-06-15"}, headers=collab_headers)
        assert response.json()["error_code"] == "CHEVAUCHEMENT_ARRIERAGE"

        response = client.patch(url, json={"periode_debut": "2024-01-15"}, headers=collab_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "PERIODE_INVALIDE"

    def test_suppression(self, client, collab_headers, arrierage):
        url = f"{ARRIERAGES}/{arrierage['id']}"
        assert client.delete(url, headers=collab_headers).status_code == 200
        assert client.get(url, headers=collab_headers).status_code == 404


class TestStatistiques:

    def test_sans_arrierage(self, client, compta_headers):
        stats = client.get(f"{ARRIERAGES}/statistics", headers=compta_headers).json()
        assert stats["nombreArrieragesEnCours"] == 0
        assert stats["tauxRecouvrement"] == 100
        assert stats["repartitionParImmeuble"] == []

    def test_statistiques(self, client, collab_headers, compta_headers, lot, arrierage):
        payer(client, collab_headers, arrierage["id"], "500000")
        second = creer_arrierage(client, collab_headers, lot["id"], "2023-07-01", "2023-12-31", "300000").json()
        payer(client, collab_headers, second["id"], "100000")

        stats = client.get(f"{ARRIERAGES}/statistics", headers=compta_headers).json()
        assert stats["totalMontantArrierage"] == 200000.0
        assert stats["nombreArrieragesEnCours"] == 1
        assert stats["totalMontantPaye"] == 600000.0
        assert stats["nombreArrieragesSoldes"] == 1
        assert stats["ancienneteMoyenne"] == 0
        assert stats["tauxRecouvrement"] == 75
        assert stats["repartitionParImmeuble"] == [{
            "immeubleId": lot["immeuble_id"], "immeubleNom": "Residence Fann",
            "montantTotal": 200000.0, "nombreArrierages": 1,
        }]

        taux = client.get(f"{ARRIERAGES}/statistics/taux-recouvrement", headers=compta_headers).json()
        assert taux == {"tauxRecouvrement": 75}

        repartition = client.get(f"{ARRIERAGES}/statistics/repartition-locataires", headers=compta_headers).json()
        assert repartition == [{
            "locataireId": lot["locataire_id"], "locataireNom": "Ndiaye Fatou",
            "montantTotal": 200000.0, "nombreArrierages": 1,
        }]

    def test_filtre_par_statut(self, client, collab_headers, arrierage):
        payer(client, collab_headers, arrierage["id"], "500000")
        assert client.get(ARRIERAGES, params={"statut": "EN_COURS"}, headers=collab_headers).json() == []
        soldes = client.get(ARRIERAGES, params={"statut": "SOLDE"}, headers=collab_headers).json()
        assert [a["id"] for a in soldes] == [arrierage["id"]]
