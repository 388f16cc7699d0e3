from unittest.mock import patch

from fastapi.testclient import TestClient

from conftest import API, auth_headers, make_token


class TestErrorEnvelope:
    def test_missing_token(self, client):
        response = client.get(f"{API}/transaction-history")
        assert response.status_code == 401
        assert response.json() == {
            "success": False,
            "error": "Authentication required",
            "code": "AUTH_001",
            "details": {},
        }

    def test_token_signed_with_other_secret(self, client, make_user):
        token = make_token(make_user(), secret="someone-else")
        response = client.get(
            f"{API}/transaction-history", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    def test_expired_token(self, client, make_user):
        token = make_token(make_user(), expires_in=-60)
        response = client.get(
            f"{API}/transaction-history", headers={"Authorization": f"Bearer {token}"}
        )
        assert response.status_code == 401

    def test_profile_missing(self, client):
        response = client.get(f"{API}/transaction-history", headers=auth_headers("ghost"))
        assert response.status_code == 404

    def test_request_validation_is_400(self, client, make_user):
        response = client.post(
            f"{API}/share-image", json={"imageId": ["not", "a", "string"]},
            headers=auth_headers(make_user()),
        )
        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_001"

    def test_unexpected_error_surfaces_message(self, app, make_user):
        user_id = make_user()
        client = TestClient(app, raise_server_exceptions=False)

        with patch(
            "auditionapi.services.wallet_service.WalletService.get_history",
            side_effect=RuntimeError("ledger exploded"),
        ):
            response = client.get(f"{API}/transaction-history", headers=auth_headers(user_id))

        assert response.status_code == 500
        assert response.json()["error"] == "ledger exploded"


class TestHistory:
    def test_latest_entries(self, client, make_user):
        user_id = make_user(diamonds=0)
        client.post(f"{API}/daily-check-in", headers=auth_headers(user_id))

        response = client.get(f"{API}/transaction-history", headers=auth_headers(user_id))

        assert response.status_code == 200
        entries = response.json()["transactions"]
        assert len(entries) == 1
        assert entries[0]["transaction_type"] == "DAILY_CHECK_IN"
        assert entries[0]["amount"] == 5


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_json_log_formatter_includes_traceback():
    import json
    import logging
    import sys

    from auditionapi.logging_config import JsonFormatter

    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord(
            "auditionapi", logging.ERROR, __file__, 1, "Job %s failed", ("j1",), sys.exc_info()
        )

    line = json.loads(JsonFormatter().format(record))
    assert line["level"] == "ERROR"
    assert line["logger"] == "auditionapi"
    assert line["message"] == "Job j1 failed"
    assert "RuntimeError: boom" in line["exc_info"]
