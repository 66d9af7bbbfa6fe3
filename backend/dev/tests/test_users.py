"""
LexImmo - Administration des utilisateurs et des rôles
Run: pytest backend/dev/tests/test_users.py -v
"""
import pytest

USERS = "/api/users"
NOUVEAU_MDP = "Cabinet2024x"


def creer_utilisateur(client, headers, email="awa.sarr@leximmo.sn", password=NOUVEAU_MDP, roles=None):
    return client.post(USERS, json={
        "email": email, "password": password, "nom": "Sarr", "prenom": "Awa",
        "roles": roles if roles is not None else ["collaborateur"],
    }, headers=headers)


def connexion(client, email, password):
    return client.post("/api/auth/login", data={"username": email, "password": password})


class TestGestionUtilisateurs:
    """Création, modification et suppression réservées aux administrateurs"""

    def test_liste_reservee_admin(self, client, admin_headers, collab_headers):
        assert client.get(USERS, headers=collab_headers).status_code == 403
        emails = [u["email"] for u in client.get(USERS, headers=admin_headers).json()]
        assert emails == ["admin@leximmo.sn", "collab@leximmo.sn", "compta@leximmo.sn"]

        comptables = client.get(USERS, params={"role": "compta"}, headers=admin_headers).json()
        assert [u["email"] for u in comptables] == ["compta@leximmo.sn"]

    def test_creation_puis_connexion(self, client, admin_headers):
        response = creer_utilisateur(client, admin_headers)
        assert response.status_code == 201, response.text
        data = response.json()
        assert data["roles"] == ["collaborateur"]
        assert data["actif"] is True
        assert "password" not in data and "hashed_password" not in data

        assert connexion(client, "awa.sarr@leximmo.sn", NOUVEAU_MDP).status_code == 200

    def test_email_existant(self, client, admin_headers):
        response = creer_utilisateur(client, admin_headers, email="Collab@LexImmo.sn")
        assert response.status_code == 409
        assert response.json()["error_code"] == "EMAIL_EXISTANT"

    @pytest.mark.parametrize("password", ["Court1", "sansmajuscule1", "SANSMINUSCULE1", "SansChiffre"])
    def test_mot_de_passe_trop_faible(self, client, admin_headers, password):
        response = creer_utilisateur(client, admin_headers, password=password)
        assert response.status_code == 400
        assert "password" in response.json()["errors"]

    def test_creation_refusee_au_collaborateur(self, client, collab_headers):
        assert creer_utilisateur(client, collab_headers).status_code == 403

    def test_changement_de_mot_de_passe(self, client, admin_headers, users):
        url = f"{USERS}/{users['compta'].id}"
        response = client.patch(url, json={"password": NOUVEAU_MDP, "nom": "Faye"}, headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["nom"] == "Faye"
        assert connexion(client, "compta@leximmo.sn", NOUVEAU_MDP).status_code == 200

        response = client.patch(url, json={"password": None}, headers=admin_headers)
        assert response.status_code == 400

    def test_suppression(self, client, admin_headers, users):
        url = f"{USERS}/{users['compta'].id}"
        assert client.delete(url, headers=admin_headers).status_code == 200
        assert client.get(url, headers=admin_headers).status_code == 404


class TestConsultation:

    def test_profil_personnel(self, client, collab_headers, users):
        response = client.get(f"{USERS}/{users['collaborateur'].id}", headers=collab_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "collab@leximmo.sn"

        roles = client.get(f"{USERS}/{users['collaborateur'].id}/roles", headers=collab_headers)
        assert roles.json() == ["collaborateur"]

    def test_profil_d_un_autre(self, client, collab_headers, users):
        response = client.get(f"{USERS}/{users['admin'].id}", headers=collab_headers)
        assert response.status_code == 403
        assert response.json()["error_code"] == "ACCESS_DENIED"
        assert client.get(f"{USERS}/{users['admin'].id}/roles", headers=collab_headers).status_code == 403


class TestRoles:

    def test_attribution_et_retrait(self, client, admin_headers, users):
        url = f"{USERS}/{users['collaborateur'].id}/roles"

        response = client.post(url, json={"role": "compta"}, headers=admin_headers)
        assert response.status_code == 201
        assert sorted(response.json()["roles"]) == ["collaborateur", "compta"]

        response = client.post(url, json={"role": "compta"}, headers=admin_headers)
        assert response.status_code == 409
        assert response.json()["error_code"] == "ROLE_DEJA_ATTRIBUE"

        response = client.delete(f"{url}/compta", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["roles"] == ["collaborateur"]

        response = client.delete(f"{url}/admin", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "ROLE_NON_ATTRIBUE"

    def test_role_inconnu(self, client, admin_headers, users):
        response = client.post(f"{USERS}/{users['collaborateur'].id}/roles", json={"role": "stagiaire"},
                               headers=admin_headers)
        assert response.status_code == 400
        assert "role" in response.json()["errors"]


class TestDernierAdministrateur:
    """Le cabinet garde toujours au moins un administrateur actif"""

    def test_dernier_admin_protege(self, client, admin_headers, users):
        admin_id = users["admin"].id

        response = client.delete(f"{USERS}/{admin_id}/roles/admin", headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["error_code"] == "DERNIER_ADMIN"

        assert client.delete(f"{USERS}/{admin_id}", headers=admin_headers).json()["error_code"] == "DERNIER_ADMIN"
        response = client.patch(f"{USERS}/{admin_id}", json={"actif": False}, headers=admin_headers)
        assert response.json()["error_code"] == "DERNIER_ADMIN"

    def test_retrait_avec_un_second_admin(self, client, admin_headers, users):
        client.post(f"{USERS}/{users['collaborateur'].id}/roles", json={"role": "admin"}, headers=admin_headers)

        response = client.delete(f"{USERS}/{users['admin'].id}/roles/admin", headers=admin_headers)
        assert response.status_code == 200
        assert response.json()["roles"] == []
