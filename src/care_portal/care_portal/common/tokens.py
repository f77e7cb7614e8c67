from __future__ import annotations

import secrets

from ..core.constants import KIOSK_DEVICE_ID_HEX_LENGTH, PAIRING_TOKEN_ALPHABET, PAIRING_TOKEN_LENGTH


def pairing_token() -> str:
    """Short human-typeable code shown on the admin screen."""
    return "".join(secrets.choice(PAIRING_TOKEN_ALPHABET) for _ in range(PAIRING_TOKEN_LENGTH))


def kiosk_device_id() -> str:
    return secrets.token_hex(KIOSK_DEVICE_ID_HEX_LENGTH // 2)


def url_token() -> str:
    """Opaque token for invite links and password resets."""
    return secrets.token_urlsafe(32)
