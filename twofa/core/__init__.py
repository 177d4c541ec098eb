"""Pure two-factor logic: TOTP, recovery codes, setup and login verification."""
