"""
Tests for clock, QR and export helpers
"""

import base64
import logging
from datetime import datetime, timezone

from twofa.core.setup import generate_setup
from twofa.middleware.logging import StructuredFormatter
from twofa.utils.clock import FixedClock, SystemClock, to_datetime
from twofa.utils.export import export_filename, render_recovery_codes
from twofa.utils.qr import generate_qr_code, to_data_uri


class TestClock:
    def test_fixed_clock(self):
        clock = FixedClock(100)
        assert clock.now() == 100.0

        clock.advance(30)
        assert clock.now() == 130.0

        clock.set(5)
        assert clock.now() == 5.0

    def test_system_clock_moves(self):
        assert SystemClock().now() > 1_600_000_000

    def test_to_datetime_is_utc(self):
        assert to_datetime(0) == datetime(1970, 1, 1, tzinfo=timezone.utc)


class TestQrCode:
    def test_png(self):
        png = base64.b64decode(generate_qr_code("otpauth://totp/FilHub:alice?secret=JBSWY3DPEHPK3PXP"))
        assert png.startswith(b"\x89PNG\r\n\x1a\n")

    def test_box_size_changes_image(self):
        data = "otpauth://totp/FilHub:alice?secret=JBSWY3DPEHPK3PXP"
        assert generate_qr_code(data, box_size=2) != generate_qr_code(data, box_size=8)

    def test_data_uri(self):
        assert to_data_uri("abc") == "data:image/png;base64,abc"


class TestExport:
    def test_filename(self):
        at = datetime(2026, 1, 2, tzinfo=timezone.utc)
        assert export_filename(at, issuer="My App") == f"my-app-backup-codes-{int(at.timestamp() * 1000)}.txt"

    def test_render(self):
        at = datetime(2026, 1, 2, 3, 4, 5, tzinfo=timezone.utc)
        text = render_recovery_codes("alice@example.com", ["aaaa1111", "bbbb2222"], generated_at=at, issuer="FilHub")

        assert text.splitlines() == [
            "FilHub - Two-Factor Authentication Backup Codes",
            "",
            "Generated: 2026-01-02 03:04:05 UTC",
            "User: alice@example.com",
            "",
            "Backup Codes (use each code only once):",
            "",
            "aaaa1111",
            "bbbb2222",
            "",
            "Keep these codes in a safe place. You can use them to access your account "
            "if you lose your authenticator device.",
        ]
        assert text.endswith("\n")


class TestGenerateSetup:
    def test_label_is_trimmed(self):
        setup = generate_setup("  alice@example.com ", issuer="FilHub")
        assert "FilHub:alice%40example.com" in setup.provisioning_uri

    def test_default_issuer(self):
        assert "issuer=FilHub" in generate_setup("bob").provisioning_uri


class TestStructuredFormatter:
    def test_json_output(self):
        record = logging.LogRecord("twofa", logging.INFO, __file__, 1, "hello", None, None)
        record.owner_id = "42"
        record.request_id = "req-1"

        output = StructuredFormatter().format(record)

        assert '"message": "hello"' in output
        assert '"owner_id": "42"' in output
