from fastapi.testclient import TestClient

from app.main import app
from app.security.auth.jwt_handler import Role

client = TestClient(app)


class TestCreateWidget:
    def test_owner_creates_widget_with_derived_slug(self, factory, auth_headers_for):
        org = factory.organization()

        response = client.post(
            "/api/v1/admin/widgets",
            json={"organizationId": org.id, "name": "Spring Drive 2025"},
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 201
        data = response.json()
        assert data["slug"] == "spring-drive-2025"
        assert data["organizationId"] == org.id
        assert data["isActive"] is True
        assert data["config"]["settings"]["minimumDonation"] == 100
        assert data["config"]["causes"] == []

    def test_requires_authentication(self, factory):
        org = factory.organization()

        response = client.post(
            "/api/v1/admin/widgets", json={"organizationId": org.id, "name": "Drive"}
        )

        assert response.status_code == 401

    def test_editor_cannot_create_for_other_organization(self, factory, auth_headers_for):
        org = factory.organization()

        response = client.post(
            "/api/v1/admin/widgets",
            json={"organizationId": org.id, "name": "Drive"},
            headers=auth_headers_for(Role.EDITOR, "other-org"),
        )

        assert response.status_code == 403

    def test_second_widget_for_organization_conflicts(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org)

        response = client.post(
            "/api/v1/admin/widgets",
            json={"organizationId": org.id, "name": "Another"},
            headers=auth_headers_for(Role.SUPER_ADMIN),
        )

        assert response.status_code == 409
        assert response.json()["error"]["category"] == "conflict"

    def test_taken_slug_conflicts(self, factory, auth_headers_for):
        factory.widget(factory.organization(), slug="spring-drive")
        other = factory.organization(name="Second Org")

        response = client.post(
            "/api/v1/admin/widgets",
            json={"organizationId": other.id, "name": "Drive", "slug": "spring-drive"},
            headers=auth_headers_for(Role.SUPER_ADMIN),
        )

        assert response.status_code == 409

    def test_invalid_slug_is_rejected(self, factory, auth_headers_for):
        org = factory.organization()

        response = client.post(
            "/api/v1/admin/widgets",
            json={"organizationId": org.id, "name": "Drive", "slug": "Not A Slug"},
            headers=auth_headers_for(Role.SUPER_ADMIN),
        )

        assert response.status_code == 422
        assert response.json()["error"]["category"] == "validation"

    def test_unknown_organization(self, auth_headers_for):
        response = client.post(
            "/api/v1/admin/widgets",
            json={"organizationId": "missing", "name": "Drive"},
            headers=auth_headers_for(Role.SUPER_ADMIN),
        )

        assert response.status_code == 404


class TestWidgetEditing:
    def test_get_includes_inactive_causes(self, factory, auth_headers_for):
        org = factory.organization()
        widget = factory.widget(org, slug="spring-drive")
        factory.cause(widget, name="Retired", is_active=False)

        response = client.get(
            "/api/v1/admin/widgets/spring-drive", headers=auth_headers_for(Role.EDITOR, org.id)
        )

        assert response.status_code == 200
        assert response.json()["config"]["causes"][0]["isActive"] is False

    def test_unknown_slug_is_404(self, auth_headers_for):
        response = client.get(
            "/api/v1/admin/widgets/nope", headers=auth_headers_for(Role.SUPER_ADMIN)
        )

        assert response.status_code == 404

    def test_deactivate_widget(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")

        response = client.patch(
            "/api/v1/admin/widgets/spring-drive",
            json={"isActive": False},
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 200
        assert response.json()["isActive"] is False
        assert client.get("/widget/spring-drive").status_code == 404

    def test_partial_config_update_keeps_other_keys(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive", config={"theme": {"headerText": "Hello"}})

        response = client.put(
            "/api/v1/admin/widgets/spring-drive/config",
            json={
                "theme": {"primaryColor": "#112233"},
                "settings": {"allowRecurring": False, "minimumDonation": 1000},
            },
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 200
        config = response.json()["config"]
        assert config["theme"]["primaryColor"] == "#112233"
        assert config["theme"]["headerText"] == "Hello"
        assert config["settings"]["allowRecurring"] is False
        assert config["settings"]["minimumDonation"] == 1000
        assert config["settings"]["showProgressBar"] is True

    def test_invalid_config_is_rejected(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")

        response = client.put(
            "/api/v1/admin/widgets/spring-drive/config",
            json={"theme": {"primaryColor": ""}},
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 422

    def test_unknown_config_key_is_rejected(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")

        response = client.put(
            "/api/v1/admin/widgets/spring-drive/config",
            json={"settings": {"confetti": True}},
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 422


class TestCauses:
    def test_cause_lifecycle(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")
        headers = auth_headers_for(Role.OWNER, org.id)

        created = client.post(
            "/api/v1/admin/widgets/spring-drive/causes",
            json={"name": " School Meals ", "goalAmount": 500000},
            headers=headers,
        )
        assert created.status_code == 201
        cause = created.json()
        assert cause["name"] == "School Meals"
        assert cause["raisedAmount"] == 0
        assert cause["isActive"] is True

        updated = client.patch(
            f"/api/v1/admin/widgets/spring-drive/causes/{cause['id']}",
            json={"isActive": False},
            headers=headers,
        )
        assert updated.status_code == 200
        assert updated.json()["isActive"] is False
        assert updated.json()["goalAmount"] == 500000

        deleted = client.delete(
            f"/api/v1/admin/widgets/spring-drive/causes/{cause['id']}", headers=headers
        )
        assert deleted.status_code == 204

        missing = client.delete(
            f"/api/v1/admin/widgets/spring-drive/causes/{cause['id']}", headers=headers
        )
        assert missing.status_code == 404

    def test_blank_cause_name_is_rejected(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")

        response = client.post(
            "/api/v1/admin/widgets/spring-drive/causes",
            json={"name": "   "},
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 422

    def test_cause_of_another_widget_is_not_found(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")
        other_widget = factory.widget(factory.organization(name="Other"), slug="other-drive")
        foreign = factory.cause(other_widget)

        response = client.patch(
            f"/api/v1/admin/widgets/spring-drive/causes/{foreign.id}",
            json={"name": "Stolen"},
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 404
