"""
LexImmo - Honoraires et dépenses des affaires
Run: pytest backend/dev/tests/test_honoraires_depenses.py -v
"""
import pytest

HONORAIRES = "/api/contentieux/honoraires"
DEPENSES = "/api/contentieux/depenses"


@pytest.fixture
def affaire(client, collab_headers):
    response = client.post("/api/contentieux/affaires", json={"intitule": "Sow c/ Banque Atlantique"},
                           headers=collab_headers)
    assert response.status_code == 201, response.text
    return response.json()


def facturer(client, headers, affaire_id, facture, encaisse="0", date="2024-04-02"):
    return client.post(HONORAIRES, json={
        "affaire_id": affaire_id, "montant_facture": facture, "montant_encaisse": encaisse,
        "date_facturation": date,
    }, headers=headers)


def depenser(client, headers, affaire_id, montant, type_depense="FRAIS_HUISSIER", date="2024-04-10"):
    return client.post(DEPENSES, json={
        "affaire_id": affaire_id, "date": date, "type_depense": type_depense,
        "nature": "Signification", "montant": montant,
    }, headers=headers)


class TestHonoraires:

    def test_facturation_et_restant(self, client, collab_headers, affaire):
        response = facturer(client, collab_headers, affaire["id"], "750000", "250000")
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["montant_restant"] == 500000.0
        assert data["affaire"]["reference"] == affaire["reference"]

        response = client.patch(f"{HONORAIRES}/{data['id']}", json={"montant_encaisse": "750000"},
                                headers=collab_headers)
        assert response.status_code == 200
        assert response.json()["montant_restant"] == 0.0

    def test_encaissement_superieur_a_la_facture(self, client, collab_headers, affaire):
        response = facturer(client, collab_headers, affaire["id"], "100000", "150000")
        assert response.status_code == 400

        honoraire = facturer(client, collab_headers, affaire["id"], "100000").json()
        response = client.patch(f"{HONORAIRES}/{honoraire['id']}", json={"montant_facture": "50000",
                                                                         "montant_encaisse": "60000"},
                                headers=collab_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ENCAISSEMENT_SUPERIEUR_FACTURE"

    def test_statistiques(self, client, collab_headers, affaire):
        facturer(client, collab_headers, affaire["id"], "750000", "250000")
        facturer(client, collab_headers, affaire["id"], "250000", "250000")

        stats = client.get(f"{HONORAIRES}/statistiques", headers=collab_headers).json()
        assert stats == {"totalFacture": 1000000.0, "totalEncaisse": 500000.0, "totalRestant": 500000.0,
                         "nombreHonoraires": 2}

        par_affaire = client.get(f"{HONORAIRES}/affaire/{affaire['id']}", headers=collab_headers).json()
        assert len(par_affaire) == 2

    def test_droits(self, client, compta_headers, collab_headers, admin_headers, affaire):
        honoraire = facturer(client, collab_headers, affaire["id"], "100000").json()
        url = f"{HONORAIRES}/{honoraire['id']}"
        assert client.get(HONORAIRES, headers=compta_headers).status_code == 403
        assert client.delete(url, headers=collab_headers).status_code == 403
        assert client.delete(url, headers=admin_headers).status_code == 200

    def test_affaire_inexistante(self, client, collab_headers):
        assert facturer(client, collab_headers, 9999, "1000").status_code == 404


class TestDepensesAffaires:

    def test_filtres(self, client, collab_headers, affaire):
        depenser(client, collab_headers, affaire["id"], "25000")
        depenser(client, collab_headers, affaire["id"], "5000", type_depense="TIMBRES_FISCAUX", date="2024-05-02")

        par_type = client.get(DEPENSES, params={"type_depense": "TIMBRES_FISCAUX"}, headers=collab_headers).json()
        assert [d["montant"] for d in par_type] == [5000.0]

        depuis_mai = client.get(DEPENSES, params={"date_debut": "2024-05-01"}, headers=collab_headers).json()
        assert [d["type_depense"] for d in depuis_mai] == ["TIMBRES_FISCAUX"]

        gros_montants = client.get(DEPENSES, params={"montant_min": "10000"}, headers=collab_headers).json()
        assert [d["montant"] for d in gros_montants] == [25000.0]

        par_route = client.get(f"{DEPENSES}/type/FRAIS_HUISSIER", headers=collab_headers).json()
        assert [d["montant"] for d in par_route] == [25000.0]

    def test_statistiques_et_rapport(self, client, collab_headers, affaire):
        depenser(client, collab_headers, affaire["id"], "25000")
        depenser(client, collab_headers, affaire["id"], "15000", date="2024-04-20")
        depenser(client, collab_headers, affaire["id"], "5000", type_depense="TIMBRES_FISCAUX", date="2024-06-02")

        stats = client.get(f"{DEPENSES}/statistiques", headers=collab_headers).json()
        assert stats["totalMontant"] == 45000.0
        assert stats["nombreDepenses"] == 3
        assert {"type": "FRAIS_HUISSIER", "montant": 40000.0, "nombre": 2} in stats["parType"]

        rapport = client.get(f"{DEPENSES}/rapport-periode",
                             params={"date_debut": "2024-04-01", "date_fin": "2024-04-30"},
                             headers=collab_headers).json()
        assert rapport["totalMontant"] == 40000.0
        assert rapport["parType"] == [{"type": "FRAIS_HUISSIER", "montant": 40000.0, "nombre": 2}]
        assert [d["date"] for d in rapport["depenses"]] == ["2024-04-20", "2024-04-10"]

        response = client.get(f"{DEPENSES}/rapport-periode",
                              params={"date_debut": "2024-05-01", "date_fin": "2024-04-01"},
                              headers=collab_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "PERIODE_INVALIDE"

    def test_montant_et_champs_obligatoires(self, client, collab_headers, affaire):
        response = depenser(client, collab_headers, affaire["id"], "0")
        assert response.status_code == 400
        assert "montant" in response.json()["errors"]

        depense = depenser(client, collab_headers, affaire["id"], "1000").json()
        response = client.patch(f"{DEPENSES}/{depense['id']}", json={"nature": None}, headers=collab_headers)
        assert response.status_code == 400
        assert "nature" in response.json()["errors"]

    def test_suppression_reservee_admin(self, client, collab_headers, admin_headers, affaire):
        depense = depenser(client, collab_headers, affaire["id"], "1000").json()
        url = f"{DEPENSES}/{depense['id']}"
        assert client.delete(url, headers=collab_headers).status_code == 403
        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=collab_headers).status_code == 404
