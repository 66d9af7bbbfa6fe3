"""
LexImmo - Impayés de loyers, statistiques et alertes
Run: pytest backend/dev/tests/test_impayes_api.py -v
"""
import pytest

IMMO = "/api/immobilier"
MOIS = "2024-03"


@pytest.fixture
def lot(client, collab_headers):
    """Immeuble, lot occupé et bail actif de 150 000 depuis janvier 2024"""
    proprietaire = client.post(f"{IMMO}/proprietaires", json={"nom": "Diallo Moussa"}, headers=collab_headers).json()
    immeuble = client.post(f"{IMMO}/immeubles", json={
        "nom": "Residence Les Almadies", "adresse": "Route des Almadies", "proprietaire_id": proprietaire["id"]
    }, headers=collab_headers).json()
    locataire = client.post(f"{IMMO}/locataires", json={"nom": "Ndiaye", "prenom": "Fatou"},
                            headers=collab_headers).json()

    response = client.post(f"{IMMO}/lots", json={
        "immeuble_id": immeuble["id"], "numero": "A101", "type": "F3", "locataire_id": locataire["id"]
    }, headers=collab_headers)
    assert response.status_code == 201, response.text
    lot = response.json()
    assert lot["statut"] == "OCCUPE"

    response = client.post(f"{IMMO}/baux", json={
        "locataire_id": locataire["id"], "lot_id": lot["id"], "montant_loyer": "150000",
        "jour_echeance": 5, "date_debut": "2024-01-01"
    }, headers=collab_headers)
    assert response.status_code == 201, response.text
    return lot


def encaisser(client, headers, lot_id, montant, mois=MOIS):
    return client.post(f"{IMMO}/encaissements", json={
        "lot_id": lot_id, "mois_concerne": mois, "montant_encaisse": montant, "date_encaissement": "2024-03-10"
    }, headers=headers)


class TestImpayes:

    def test_lot_sans_encaissement(self, client, compta_headers, lot):
        lignes = client.get(f"{IMMO}/impayes", params={"mois": MOIS}, headers=compta_headers).json()
        assert len(lignes) == 1
        assert lignes[0]["lotNumero"] == "A101"
        assert lignes[0]["locataireNom"] == "Ndiaye Fatou"
        assert lignes[0]["montantManquant"] == 150000.0
        assert lignes[0]["statut"] == "IMPAYE"

    def test_paiement_partiel_puis_solde(self, client, collab_headers, lot):
        assert encaisser(client, collab_headers, lot["id"], "100000").status_code == 201
        lignes = client.get(f"{IMMO}/impayes", params={"mois": MOIS}, headers=collab_headers).json()
        assert lignes[0]["statut"] == "PARTIEL"
        assert lignes[0]["montantManquant"] == 50000.0

        encaisser(client, collab_headers, lot["id"], "50000")
        assert client.get(f"{IMMO}/impayes", params={"mois": MOIS}, headers=collab_headers).json() == []

    def test_mois_invalide(self, client, collab_headers):
        response = client.get(f"{IMMO}/impayes", params={"mois": "2024-13"}, headers=collab_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "INVALID_MONTH"

    def test_encaissement_mois_invalide(self, client, collab_headers, lot):
        response = encaisser(client, collab_headers, lot["id"], "1000", mois="03/2024")
        assert response.status_code == 400
        assert "mois_concerne" in response.json()["errors"]


class TestStatistiques:

    def test_statistiques_du_mois(self, client, compta_headers, collab_headers, lot):
        encaisser(client, collab_headers, lot["id"], "150000", mois="2024-02")
        encaisser(client, collab_headers, lot["id"], "60000")

        stats = client.get(f"{IMMO}/impayes/statistiques", params={"mois": MOIS}, headers=compta_headers).json()
        assert stats["totalAttendu"] == 150000.0
        assert stats["totalPayes"] == 60000.0
        assert stats["totalImpayes"] == 90000.0
        assert stats["tauxImpayes"] == 100.0
        assert stats["repartitionParImmeuble"][0]["immeubleNom"] == "Residence Les Almadies"

        evolution = {point["mois"]: point["montant"] for point in stats["evolutionMensuelle"]}
        assert evolution["2024-01"] == 150000.0
        assert evolution["2024-02"] == 0.0
        assert evolution[MOIS] == 90000.0


class TestAlertes:

    def test_generation_sans_doublon_puis_resolution(self, client, collab_headers, lot):
        resultat = client.post(f"{IMMO}/impayes/alertes", params={"mois": MOIS}, headers=collab_headers).json()
        assert resultat["alertesCreees"] == 1

        resultat = client.post(f"{IMMO}/impayes/alertes", params={"mois": MOIS}, headers=collab_headers).json()
        assert resultat["alertesCreees"] == 0
        assert resultat["alertesExistantes"] == 1

        alertes = client.get(f"{IMMO}/alertes", headers=collab_headers).json()
        assert len(alertes) == 1
        assert alertes[0]["type"] == "LOYER_IMPAYE"
        assert alertes[0]["mois"] == MOIS
        assert alertes[0]["lien"] == f"/immobilier/lots/{lot['id']}"

        lue = client.patch(f"{IMMO}/alertes/{alertes[0]['id']}/lu", headers=collab_headers).json()
        assert lue["lu"] is True

        encaisser(client, collab_headers, lot["id"], "150000")
        assert client.get(f"{IMMO}/alertes", headers=collab_headers).json() == []

    def test_generation_reservee_a_l_ecriture(self, client, compta_headers):
        response = client.post(f"{IMMO}/impayes/alertes", params={"mois": MOIS}, headers=compta_headers)
        assert response.status_code == 403
