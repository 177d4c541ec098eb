"""
Integration tests for the two-factor HTTP endpoints
"""

from conftest import DEMO_SECRET, T0, TestSessionLocal
from twofa.core.records import TwoFactorSecret
from twofa.core.recovery_codes import hash_recovery_code
from twofa.core.totp import totp_at
from twofa.stores.sql import SQLAlchemyTwoFactorStore

BASE = "/api/v1/2fa"
CODES = ["aaaa1111", "bbbb2222", "cccc3333", "dddd4444", "eeee5555", "ffff6666", "gggg7777", "hhhh8888"]


async def enable(client, owner_id="42"):
    setup = (await client.post(f"{BASE}/{owner_id}/setup", json={"owner_label": "alice@example.com"})).json()
    response = await client.post(
        f"{BASE}/{owner_id}/setup/confirm",
        json={"secret": setup["secret"], "code": totp_at(setup["secret"], T0)},
    )
    assert response.status_code == 200
    return {**setup, "recovery_codes": response.json()["recovery_codes"]}


class TestSetupEndpoints:
    async def test_status_when_disabled(self, client):
        response = await client.get(f"{BASE}/42/status")

        assert response.status_code == 200
        assert response.json()["enabled"] is False

    async def test_setup(self, client):
        response = await client.post(f"{BASE}/42/setup", json={"owner_label": "alice@example.com"})

        assert response.status_code == 200
        data = response.json()
        assert data["provisioning_uri"].startswith("otpauth://totp/")
        assert "recovery_codes" not in data
        assert data["qr_code_data_uri"].startswith("data:image/png;base64,")
        assert data["already_enabled"] is False

    async def test_setup_requires_label(self, client):
        response = await client.post(f"{BASE}/42/setup", json={})

        assert response.status_code == 422
        assert response.json()["error"]["error_code"] == "VALIDATION_FAILED"

    async def test_blank_label(self, client):
        response = await client.post(f"{BASE}/42/setup", json={"owner_label": "   "})

        assert response.status_code == 400
        assert response.json()["error"]["error_code"] == "VALIDATION_INVALID_OWNER_LABEL"

    async def test_confirm_enables(self, client):
        await enable(client)
        status = (await client.get(f"{BASE}/42/status")).json()

        assert status["enabled"] is True
        assert status["remaining_recovery_codes"] == 8

    async def test_confirm_with_wrong_code(self, client):
        setup = (await client.post(f"{BASE}/42/setup", json={"owner_label": "alice"})).json()
        response = await client.post(
            f"{BASE}/42/setup/confirm",
            json={"secret": setup["secret"], "code": totp_at(setup["secret"], T0 + 3600)},
        )

        assert response.status_code == 401
        assert response.json()["error"]["error_code"] == "TWO_FACTOR_INVALID_CODE"
        assert (await client.get(f"{BASE}/42/status")).json()["enabled"] is False

    async def test_confirm_returns_codes_once(self, client):
        setup = await enable(client)
        status = (await client.get(f"{BASE}/42/status")).json()

        assert len(setup["recovery_codes"]) == 8
        assert "recovery_codes" not in status

    async def test_client_chosen_codes_are_ignored(self, client):
        setup = (await client.post(f"{BASE}/42/setup", json={"owner_label": "alice"})).json()
        chosen = [f"0000000{i}" for i in range(8)]

        response = await client.post(
            f"{BASE}/42/setup/confirm",
            json={"secret": setup["secret"], "code": totp_at(setup["secret"], T0), "recovery_codes": chosen},
        )

        assert response.status_code == 200
        assert set(response.json()["recovery_codes"]).isdisjoint(chosen)
        async with TestSessionLocal() as session:
            record = await SQLAlchemyTwoFactorStore(session).load("42")
        assert not {hash_recovery_code(c) for c in chosen} & set(record.recovery_codes)

    async def test_resetup_without_current_factor(self, client):
        first = await enable(client)
        other = (await client.post(f"{BASE}/42/setup", json={"owner_label": "alice"})).json()

        response = await client.post(
            f"{BASE}/42/setup/confirm",
            json={"secret": other["secret"], "code": totp_at(other["secret"], T0)},
        )

        assert response.status_code == 409
        assert response.json()["error"]["error_code"] == "TWO_FACTOR_ALREADY_ENABLED"
        verify = await client.post(f"{BASE}/42/verify", json={"code": totp_at(first["secret"], T0)})
        assert verify.status_code == 200

    async def test_resetup_with_current_backup_code(self, client):
        first = await enable(client)
        other = (await client.post(f"{BASE}/42/setup", json={"owner_label": "alice"})).json()

        response = await client.post(
            f"{BASE}/42/setup/confirm",
            json={
                "secret": other["secret"],
                "code": totp_at(other["secret"], T0),
                "current_method": "backup",
                "current_code": first["recovery_codes"][0],
            },
        )

        assert response.status_code == 200
        old = await client.post(
            f"{BASE}/42/verify", json={"method": "backup", "code": first["recovery_codes"][1]}
        )
        assert old.status_code == 401


class TestVerifyEndpoint:
    async def test_verify_totp(self, client):
        setup = await enable(client)
        response = await client.post(f"{BASE}/42/verify", json={"code": totp_at(setup["secret"], T0)})

        assert response.status_code == 200
        assert response.json() == {
            "valid": True,
            "state": "verified",
            "reason": None,
            "message": "Code verified successfully",
        }

    async def test_verify_wrong_totp(self, client):
        setup = await enable(client)
        response = await client.post(f"{BASE}/42/verify", json={"code": totp_at(setup["secret"], T0 + 3600)})

        assert response.status_code == 401
        error = response.json()["error"]
        assert error["error_code"] == "TWO_FACTOR_INVALID_CODE"
        assert error["details"] == {"reason": "invalid_code"}

    async def test_backup_code_single_use(self, client):
        setup = await enable(client)
        code = setup["recovery_codes"][0]

        first = await client.post(f"{BASE}/42/verify", json={"method": "backup", "code": code.upper()})
        second = await client.post(f"{BASE}/42/verify", json={"method": "backup", "code": code})

        assert first.status_code == 200
        assert second.status_code == 401
        assert second.json()["error"]["details"] == {"reason": "invalid_backup_code"}
        assert (await client.get(f"{BASE}/42/status")).json()["remaining_recovery_codes"] == 7

    async def test_not_enabled(self, client):
        response = await client.post(f"{BASE}/42/verify", json={"code": "123456"})

        assert response.status_code == 200
        data = response.json()
        assert data["valid"] is False
        assert data["state"] == "not_applicable"
        assert data["reason"] == "two_factor_not_enabled"

    async def test_corrupt_secret(self, client):
        async with TestSessionLocal() as session:
            await SQLAlchemyTwoFactorStore(session).save(TwoFactorSecret.create("42", "corrupt secret!!", CODES))

        response = await client.post(f"{BASE}/42/verify", json={"code": "123456"})

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["error_code"] == "TWO_FACTOR_SECRET_INVALID"
        assert error["details"] == {"owner_id": "42"}

    async def test_unknown_method(self, client):
        response = await client.post(f"{BASE}/42/verify", json={"method": "sms", "code": "123456"})

        assert response.status_code == 422

    async def test_request_id_header(self, client):
        response = await client.post(f"{BASE}/42/verify", json={"code": "123456"})

        assert response.headers["X-Request-ID"]


class TestDisableEndpoint:
    async def test_disable(self, client):
        setup = await enable(client)
        response = await client.post(f"{BASE}/42/disable", json={"code": totp_at(setup["secret"], T0)})

        assert response.status_code == 200
        assert response.json()["disabled"] is True
        assert (await client.get(f"{BASE}/42/status")).json()["enabled"] is False

    async def test_disable_wrong_code(self, client):
        await enable(client)
        response = await client.post(f"{BASE}/42/disable", json={"method": "backup", "code": "zzzz0000"})

        assert response.status_code == 401
        assert (await client.get(f"{BASE}/42/status")).json()["enabled"] is True

    async def test_disable_not_enabled(self, client):
        response = await client.post(f"{BASE}/42/disable", json={"code": "123456"})

        assert response.status_code == 404
        assert response.json()["error"]["error_code"] == "TWO_FACTOR_NOT_ENABLED"


class TestExportEndpoint:
    async def test_export(self, client):
        response = await client.post(
            f"{BASE}/recovery-codes/export",
            json={"owner_label": "alice@example.com", "recovery_codes": CODES},
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.headers["content-disposition"] == (
            f'attachment; filename="filhub-backup-codes-{T0 * 1000}.txt"'
        )
        assert "aaaa1111" in response.text

    async def test_export_requires_codes(self, client):
        response = await client.post(
            f"{BASE}/recovery-codes/export",
            json={"owner_label": "alice@example.com", "recovery_codes": []},
        )

        assert response.status_code == 422


class TestHealth:
    async def test_health(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"
