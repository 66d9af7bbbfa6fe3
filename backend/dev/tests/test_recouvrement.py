"""
LexImmo - Dossiers de recouvrement et paiements
Run: pytest backend/dev/tests/test_recouvrement.py -v
"""
import pytest

DOSSIERS = "/api/recouvrement/dossiers"


@pytest.fixture
def dossier(client, collab_headers):
    response = client.post(DOSSIERS, json={
        "creancier_nom": "Banque de l'Habitat",
        "debiteur_nom": "Ets Fall & Fils",
        "montant_principal": "1000000",
        "penalites_interets": "50000",
    }, headers=collab_headers)
    assert response.status_code == 201, response.text
    return response.json()


def payer(client, headers, dossier_id, montant, **extra):
    payload = {"date": "2024-03-15", "montant": montant}
    payload.update(extra)
    return client.post(f"{DOSSIERS}/{dossier_id}/paiements", json=payload, headers=headers)


class TestSolde:
    """total_a_recouvrer = principal + pénalités, solde = total - paiements"""

    def test_creation(self, dossier):
        assert dossier["reference"].startswith("REC")
        assert dossier["total_a_recouvrer"] == 1050000.0
        assert dossier["solde_restant"] == 1050000.0
        assert dossier["statut"] == "EN_COURS"

    def test_paiements_successifs(self, client, collab_headers, dossier):
        assert payer(client, collab_headers, dossier["id"], "300000").status_code == 201
        assert payer(client, collab_headers, dossier["id"], "250000", mode="CHEQUE").status_code == 201

        data = client.get(f"{DOSSIERS}/{dossier['id']}", headers=collab_headers).json()
        assert data["total_paiements"] == 550000.0
        assert data["solde_restant"] == data["total_a_recouvrer"] - data["total_paiements"]
        assert len(data["paiements"]) == 2

    def test_modification_des_montants(self, client, collab_headers, dossier):
        response = client.patch(f"{DOSSIERS}/{dossier['id']}", json={"penalites_interets": "100000"},
                                headers=collab_headers)
        assert response.status_code == 200
        assert response.json()["total_a_recouvrer"] == 1100000.0


class TestPaiements:

    def test_paiement_superieur_au_solde(self, client, collab_headers, dossier):
        response = payer(client, collab_headers, dossier["id"], "2000000")
        assert response.status_code == 400
        assert response.json()["error_code"] == "PAIEMENT_SUPERIEUR_SOLDE"
        assert response.json()["details"]["solde_restant"] == 1050000.0

    def test_champ_inconnu(self, client, collab_headers, dossier):
        response = payer(client, collab_headers, dossier["id"], "1000", remise="10%")
        assert response.status_code == 400
        assert "remise" in response.json()["errors"]

    def test_montant_nul(self, client, collab_headers, dossier):
        response = payer(client, collab_headers, dossier["id"], "0")
        assert response.status_code == 400
        assert "montant" in response.json()["errors"]

    def test_montant_inferieur_au_centime(self, client, collab_headers, dossier):
        response = payer(client, collab_headers, dossier["id"], "0.001")
        assert response.status_code == 400
        assert "montant" in response.json()["errors"]

        data = client.get(f"{DOSSIERS}/{dossier['id']}", headers=collab_headers).json()
        assert data["paiements"] == []

    def test_montant_arrondi_au_centime(self, client, collab_headers, dossier):
        response = payer(client, collab_headers, dossier["id"], "1500.456")
        assert response.status_code == 201
        assert response.json()["montant"] == 1500.46

    def test_cloture_puis_reouverture(self, client, collab_headers, admin_headers, dossier):
        premier = payer(client, collab_headers, dossier["id"], "1000000").json()
        payer(client, collab_headers, dossier["id"], "50000")

        data = client.get(f"{DOSSIERS}/{dossier['id']}", headers=collab_headers).json()
        assert data["solde_restant"] == 0.0
        assert data["statut"] == "CLOTURE"

        assert client.delete(f"/api/recouvrement/paiements/{premier['id']}", headers=collab_headers).status_code == 403
        response = client.delete(f"/api/recouvrement/paiements/{premier['id']}", headers=admin_headers)
        assert response.status_code == 200

        data = client.get(f"{DOSSIERS}/{dossier['id']}", headers=collab_headers).json()
        assert data["solde_restant"] == 1000000.0
        assert data["statut"] == "EN_COURS"

    def test_dossier_inexistant(self, client, collab_headers):
        assert payer(client, collab_headers, 9999, "100").status_code == 404


class TestStatistiques:

    def test_statistiques(self, client, compta_headers, collab_headers, dossier):
        payer(client, collab_headers, dossier["id"], "525000")
        stats = client.get(f"{DOSSIERS}/statistiques", headers=compta_headers).json()
        assert stats["nombreDossiers"] == 1
        assert stats["parStatut"]["EN_COURS"] == 1
        assert stats["soldeRestant"] == 525000.0
        assert stats["tauxRecouvrement"] == 50.0


def ajouter_action(client, headers, dossier_id, date, type_action="LETTRE_RELANCE", **extra):
    payload = {"date": date, "type_action": type_action, "resume": "Relance écrite au débiteur"}
    payload.update(extra)
    return client.post(f"{DOSSIERS}/{dossier_id}/actions", json=payload, headers=headers)


class TestActions:
    """Historique des démarches menées sur un dossier"""

    def test_historique_du_plus_recent_au_plus_ancien(self, client, collab_headers, compta_headers, dossier):
        assert ajouter_action(client, collab_headers, dossier["id"], "2024-01-10",
                              type_action="APPEL_TELEPHONIQUE").status_code == 201
        response = ajouter_action(client, collab_headers, dossier["id"], "2024-02-05",
                                  type_action="MISE_EN_DEMEURE", prochaine_etape="Assignation",
                                  echeance_prochaine_etape="2024-03-05")
        assert response.status_code == 201, response.text
        assert response.json()["dossier_reference"] == dossier["reference"]

        actions = client.get(f"{DOSSIERS}/{dossier['id']}/actions", headers=compta_headers).json()
        assert [a["type_action"] for a in actions] == ["MISE_EN_DEMEURE", "APPEL_TELEPHONIQUE"]

        data = client.get(f"{DOSSIERS}/{dossier['id']}", headers=compta_headers).json()
        assert data["solde_restant"] == 1050000.0

    def test_echeance_avant_action(self, client, collab_headers, dossier):
        response = ajouter_action(client, collab_headers, dossier["id"], "2024-02-05",
                                  echeance_prochaine_etape="2024-01-01")
        assert response.status_code == 400
        assert "body" in response.json()["errors"]

        action = ajouter_action(client, collab_headers, dossier["id"], "2024-02-05",
                                echeance_prochaine_etape="2024-02-20").json()
        response = client.patch(f"/api/recouvrement/actions/{action['id']}", json={"date": "2024-03-01"},
                                headers=collab_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ECHEANCE_AVANT_ACTION"

    def test_type_inconnu(self, client, collab_headers, dossier):
        response = ajouter_action(client, collab_headers, dossier["id"], "2024-02-05", type_action="VISITE")
        assert response.status_code == 400
        assert "type_action" in response.json()["errors"]

    def test_modification_et_suppression(self, client, collab_headers, compta_headers, admin_headers, dossier):
        action = ajouter_action(client, collab_headers, dossier["id"], "2024-02-05").json()
        url = f"/api/recouvrement/actions/{action['id']}"

        assert client.patch(url, json={"resume": "Courrier recommandé"}, headers=compta_headers).status_code == 403
        response = client.patch(url, json={"resume": "Courrier recommandé"}, headers=collab_headers)
        assert response.status_code == 200
        assert response.json()["resume"] == "Courrier recommandé"

        assert client.delete(url, headers=collab_headers).status_code == 403
        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=collab_headers).status_code == 404

    def test_dossier_inexistant(self, client, collab_headers):
        assert ajouter_action(client, collab_headers, 9999, "2024-02-05").status_code == 404
        assert client.get(f"{DOSSIERS}/9999/actions", headers=collab_headers).status_code == 404
