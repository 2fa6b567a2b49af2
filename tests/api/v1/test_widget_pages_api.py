import json
import re

from fastapi.testclient import TestClient

from app.main import app
from app.security.auth.jwt_handler import Role

client = TestClient(app)

DATA_BLOCK = re.compile(
    r'<script type="application/json" id="passiton-widget-data">(.*?)</script>', re.S
)


def page_payload(html):
    return json.loads(DATA_BLOCK.search(html).group(1))


class TestPublicPage:
    def test_renders_active_widget(self, factory):
        org = factory.organization()
        widget = factory.widget(org, slug="spring-drive", config={"theme": {"headerText": "Spring Drive"}})
        factory.cause(widget, name="Clean Water")

        response = client.get("/widget/spring-drive")

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/html")
        assert "<h1>Spring Drive</h1>" in response.text
        assert "Clean Water" in response.text
        assert "$10.00" in response.text
        payload = page_payload(response.text)
        assert payload["widget"]["slug"] == "spring-drive"
        assert payload["preview"] is False
        assert payload["donateUrl"] == "/widget/spring-drive/donate"
        assert payload["closeMessage"] == {"type": "passiton-widget", "action": "close"}

    def test_page_carries_amount_limits(self, factory):
        factory.widget(
            factory.organization(), slug="spring-drive", config={"settings": {"minimumDonation": 500}}
        )

        payload = page_payload(client.get("/widget/spring-drive").text)

        assert payload["limits"] == {"minimum": 500, "maximum": 1_000_000}

    def test_page_script_validates_before_posting(self):
        script = client.get("/static/widget/widget-page.js").text

        assert "data.limits.minimum" in script
        assert script.index("validate(amount, causeId)") < script.index("fetch(data.donateUrl")

    def test_page_is_frameable(self, factory):
        factory.widget(factory.organization(), slug="spring-drive")

        response = client.get("/widget/spring-drive")

        assert "x-frame-options" not in response.headers
        assert "frame-ancestors *" in response.headers["content-security-policy"]

    def test_unknown_slug_renders_not_found_page(self):
        response = client.get("/widget/nope")

        assert response.status_code == 404
        assert "Widget Not Found" in response.text

    def test_inactive_widget_renders_not_found_page(self, factory):
        factory.widget(factory.organization(), slug="paused-drive", is_active=False)

        response = client.get("/widget/paused-drive")

        assert response.status_code == 404
        assert "Widget Not Found" in response.text

    def test_inactive_causes_are_hidden(self, factory):
        widget = factory.widget(factory.organization(), slug="spring-drive")
        factory.cause(widget, name="Visible Cause", position=0)
        factory.cause(widget, name="Retired Cause", is_active=False, position=1)

        response = client.get("/widget/spring-drive")

        assert "Visible Cause" in response.text
        assert "Retired Cause" not in response.text


class TestPublicDonate:
    def test_valid_donation_returns_handoff(self, factory):
        org = factory.organization(stripe_customer_id="cus_42")
        widget = factory.widget(org, slug="spring-drive")
        cause = factory.cause(widget)

        response = client.post("/widget/spring-drive/donate", json={"amount": 2500})

        assert response.status_code == 200
        data = response.json()
        assert data["ok"] is True
        assert data["handoff"] == {
            "amount": 2500,
            "causeId": cause.id,
            "frequency": "one-time",
            "organizationId": org.id,
            "organizationName": "Helping Hands",
            "stripeCustomerId": "cus_42",
            "widgetId": widget.id,
        }

    def test_invalid_donation_returns_issues(self, factory):
        widget = factory.widget(factory.organization(), slug="spring-drive")
        factory.cause(widget, name="A", position=0)
        factory.cause(widget, name="B", position=1)

        response = client.post("/widget/spring-drive/donate", json={"customAmount": "0.50"})

        assert response.status_code == 422
        fields = [issue["field"] for issue in response.json()["issues"]]
        assert fields == ["amount", "cause"]

    def test_oversized_custom_amount_is_a_validation_issue(self, factory):
        factory.widget(factory.organization(), slug="spring-drive")

        response = client.post("/widget/spring-drive/donate", json={"customAmount": "1e400"})

        assert response.status_code == 422
        assert response.json()["issues"] == [
            {"field": "amount", "message": "Please enter a donation amount of at most $10,000.00"}
        ]

    def test_oversized_amount_is_rejected_before_the_form(self, factory):
        factory.widget(factory.organization(), slug="spring-drive")

        response = client.post("/widget/spring-drive/donate", json={"amount": 10**30})

        assert response.status_code == 422
        assert "detail" in response.json()

    def test_donation_to_unknown_widget(self):
        response = client.post("/widget/nope/donate", json={"amount": 2500})

        assert response.status_code == 404
        assert response.json()["error"]["category"] == "not_found"


class TestAdminPreview:
    def test_requires_authentication(self, factory):
        factory.widget(factory.organization(), slug="spring-drive")

        assert client.get("/admin/widgets/preview/spring-drive").status_code == 401

    def test_owner_previews_inactive_widget_with_all_causes(self, factory, auth_headers_for):
        org = factory.organization()
        widget = factory.widget(org, slug="paused-drive", is_active=False)
        factory.cause(widget, name="Visible Cause", position=0)
        factory.cause(widget, name="Retired Cause", is_active=False, position=1)

        response = client.get(
            "/admin/widgets/preview/paused-drive",
            headers=auth_headers_for(Role.OWNER, org.id),
        )

        assert response.status_code == 200
        assert "Admin preview" in response.text
        assert "inactive" in response.text
        assert "Retired Cause" in response.text
        assert page_payload(response.text)["preview"] is True

    def test_session_cookie_is_accepted(self, factory, token_factory):
        org = factory.organization()
        factory.widget(org, slug="spring-drive")
        cookie_client = TestClient(app, cookies={"passiton_session": token_factory(Role.SUPER_ADMIN)})

        assert cookie_client.get("/admin/widgets/preview/spring-drive").status_code == 200

    def test_other_organization_is_forbidden(self, factory, auth_headers_for):
        factory.widget(factory.organization(), slug="spring-drive")

        response = client.get(
            "/admin/widgets/preview/spring-drive",
            headers=auth_headers_for(Role.EDITOR, "some-other-org"),
        )

        assert response.status_code == 403

    def test_preview_donation_does_not_hand_off(self, factory, auth_headers_for):
        org = factory.organization()
        factory.widget(org, slug="paused-drive", is_active=False)

        response = client.post(
            "/admin/widgets/preview/paused-drive/donate",
            json={"customAmount": "15"},
            headers=auth_headers_for(Role.SUPER_ADMIN),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["preview"] is True
        assert "handoff" not in data
        assert data["message"].startswith("[ADMIN PREVIEW] This would process a donation of $15.00")
