"""Plain-text export of recovery codes for the user to download."""

from datetime import datetime, timezone

from twofa.config import settings


def export_filename(at: datetime | None = None, issuer: str | None = None) -> str:
    at = at or datetime.now(timezone.utc)
    slug = (issuer or settings.totp_issuer).lower().replace(" ", "-")
    return f"{slug}-backup-codes-{int(at.timestamp() * 1000)}.txt"


def render_recovery_codes(
    owner_label: str,
    codes: list[str],
    generated_at: datetime | None = None,
    issuer: str | None = None,
) -> str:
    """
    Format recovery codes as a text file.

    The header names the issuer, generation time and account; codes follow
    one per line.
    """
    generated_at = generated_at or datetime.now(timezone.utc)
    issuer = issuer or settings.totp_issuer

    lines = [
        f"{issuer} - Two-Factor Authentication Backup Codes",
        "",
        f"Generated: {generated_at.strftime('%Y-%m-%d %H:%M:%S %Z').strip()}",
        f"User: {owner_label}",
        "",
        "Backup Codes (use each code only once):",
        "",
        *codes,
        "",
        "Keep these codes in a safe place. You can use them to access your account "
        "if you lose your authenticator device.",
    ]
    return "\n".join(lines) + "\n"
