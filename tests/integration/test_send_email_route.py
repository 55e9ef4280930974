import httpx
import pytest

from tests.conftest import make_settings

MESSAGE = {
    "to": "baker@example.com",
    "subject": "Thank You for Your Order",
    "text": "Your loaf is on its way.",
}


def test_sent(client, sendgrid):
    response = client.post("/send-email", json=MESSAGE)

    assert response.status_code == 200
    assert response.json() == {"status": "SENT", "message": "Email sent successfully"}

    sent = sendgrid.last_json
    assert sent["personalizations"] == [{"to": [{"email": "baker@example.com"}]}]
    assert sent["from"] == {"email": "orders@littleloaf.test"}
    assert sent["subject"] == "Thank You for Your Order"
    # html falls back to the text body
    assert sent["content"][1] == {"type": "text/html", "value": "Your loaf is on its way."}
    assert sendgrid.requests[-1].headers["Authorization"] == "Bearer SG.test-key"


def test_explicit_sender_and_html(client, sendgrid):
    client.post(
        "/send-email",
        json={**MESSAGE, "from": "owner@littleloaf.test", "html": "<p>Your loaf</p>"},
    )

    sent = sendgrid.last_json
    assert sent["from"] == {"email": "owner@littleloaf.test"}
    assert sent["content"][1]["value"] == "<p>Your loaf</p>"


@pytest.mark.parametrize("missing", ["to", "subject", "text"])
def test_missing_required_field(client, sendgrid, missing):
    body = {k: v for k, v in MESSAGE.items() if k != missing}

    response = client.post("/send-email", json=body)

    assert response.status_code == 400
    assert response.json() == {"status": "FAILED", "error": "Missing required fields: to, subject, text"}
    assert sendgrid.requests == []


@pytest.mark.parametrize("recipient", ["baker", "baker@example", "@example.com"])
def test_invalid_recipient(client, sendgrid, recipient):
    response = client.post("/send-email", json={**MESSAGE, "to": recipient})

    assert response.status_code == 400
    assert response.json()["error"] == "Invalid recipient email address"
    assert sendgrid.requests == []


def test_email_not_configured(build_client, sendgrid):
    client = build_client(make_settings(sendgrid_api_key=None))

    response = client.post("/send-email", json=MESSAGE)

    assert response.status_code == 500
    assert response.json() == {"status": "FAILED", "error": "Email service not configured"}


def test_provider_failure(client, sendgrid):
    sendgrid.status_code = 401
    sendgrid.body = {"errors": [{"message": "The provided authorization grant is invalid"}]}

    response = client.post("/send-email", json=MESSAGE)

    assert response.status_code == 500
    assert response.json() == {
        "status": "FAILED",
        "error": "The provided authorization grant is invalid",
    }


def test_provider_failure_detail_in_debug(build_client, sendgrid):
    client = build_client(make_settings(debug_send_email=True))
    sendgrid.status_code = 400
    sendgrid.body = {"errors": [{"message": "Bad from address", "field": "from"}]}

    data = client.post("/send-email", json=MESSAGE).json()

    assert data["error"] == "Bad from address"
    assert data["detail"] == {"errors": [{"message": "Bad from address", "field": "from"}]}


def test_success_detail_in_debug(build_client, sendgrid):
    client = build_client(make_settings(debug_send_email=True))

    data = client.post("/send-email", json=MESSAGE).json()

    assert data["detail"] == {"statusCode": 202}


def test_provider_unreachable(client, sendgrid):
    sendgrid.error = httpx.ConnectTimeout("timed out")

    response = client.post("/send-email", json=MESSAGE)

    assert response.status_code == 500
    assert response.json()["status"] == "FAILED"
    assert "Email sending failed" in response.json()["error"]


def test_invalid_body(client):
    response = client.post(
        "/send-email",
        content="to=baker@example.com",
        headers={"Content-Type": "application/json"},
    )
    assert response.status_code == 400
    assert response.json() == {"status": "FAILED", "error": "Invalid request body"}


def test_wrong_method(client):
    response = client.get("/send-email")
    assert response.status_code == 405
    assert response.json()["error"] == "Method not allowed"


def test_preflight(client):
    response = client.options("/send-email")
    assert response.status_code == 200
    assert response.headers["access-control-allow-methods"] == "POST, OPTIONS"
