from __future__ import annotations

import io
from datetime import timedelta
from types import SimpleNamespace

import pytest
from PIL import Image

from conftest import FIXED_NOW
from src.care_portal.care_portal.core.enums import KioskStatus, PairingStatus
from src.care_portal.care_portal.core.exceptions import AuthorizationError, NotFoundError, ValidationError
from src.care_portal.care_portal.kiosks import qr as qr_module
from src.care_portal.care_portal.kiosks import service as kiosk_service_module
from src.care_portal.care_portal.kiosks.qr import decode_qr_image, pairing_qr_png


def _pair(world, people, **kwargs):
    return world.container.kiosk_service.create_kiosk_pairing(
        actor_id=people["admin"], location="Maple House", now=FIXED_NOW, **kwargs
    )


def test_pairing_round_trip(world, people):
    kiosks = world.container.kiosk_service
    issued = _pair(world, people, device_label=" Front desk ")
    assert len(issued["token"]) == 8
    assert issued["device_label"] == "Front desk"

    result = kiosks.complete_pairing(
        token=issued["token"].lower(), kiosk_identifier="tablet-1", now=FIXED_NOW + timedelta(minutes=5)
    )
    assert result["location"] == "Maple House"
    assert len(result["device_id"]) == 16

    kiosk = world.kiosks.get_by_id(result["kiosk_id"])
    assert kiosk.name == "Front desk"
    assert kiosk.last_seen_at == FIXED_NOW + timedelta(minutes=5)
    token = world.pairing_tokens.get_by_token(issued["token"])
    assert token.status == PairingStatus.USED
    assert token.device_id == result["device_id"]
    assert "kiosk_paired" in world.audit.events()


def test_token_can_only_be_used_once(world, people):
    kiosks = world.container.kiosk_service
    issued = _pair(world, people)
    kiosks.complete_pairing(token=issued["token"], now=FIXED_NOW)
    with pytest.raises(ValidationError, match="Token already used or expired"):
        kiosks.complete_pairing(token=issued["token"], now=FIXED_NOW)


def test_expired_and_unknown_tokens(world, people):
    kiosks = world.container.kiosk_service
    issued = _pair(world, people)
    with pytest.raises(ValidationError, match="Token expired"):
        kiosks.complete_pairing(token=issued["token"], now=FIXED_NOW + timedelta(minutes=16))
    with pytest.raises(ValidationError, match="Invalid pairing token"):
        kiosks.complete_pairing(token="NOPE1234")


def test_list_pairing_tokens_expires_stale_ones(world, people):
    kiosks = world.container.kiosk_service
    old = _pair(world, people)
    fresh = kiosks.create_kiosk_pairing(
        actor_id=people["admin"], location="Cedar House", now=FIXED_NOW + timedelta(minutes=10)
    )

    listed = kiosks.list_pairing_tokens(actor_id=people["admin"], now=FIXED_NOW + timedelta(minutes=20))
    assert [t["token"] for t in listed] == [fresh["token"]]
    assert world.pairing_tokens.get_by_token(old["token"]).status == PairingStatus.EXPIRED


def test_pairing_needs_admin(world, people):
    with pytest.raises(AuthorizationError):
        world.container.kiosk_service.create_kiosk_pairing(actor_id=people["supervisor"], location="Maple House")


def test_pairing_from_image_uses_decoded_token(world, people, monkeypatch):
    issued = _pair(world, people)
    monkeypatch.setattr(kiosk_service_module, "decode_qr_image", lambda stream: issued["token"])
    result = world.container.kiosk_service.complete_pairing_from_image(io.BytesIO(b"png"), now=FIXED_NOW)
    assert result["location"] == "Maple House"


def test_qr_png_is_an_image():
    buf = pairing_qr_png("ABCD2345")
    img = Image.open(buf)
    assert img.format == "PNG"


def test_decode_rejects_non_images():
    with pytest.raises(ValidationError, match="Uploaded file is not an image"):
        decode_qr_image(io.BytesIO(b"definitely not an image"))


def test_decode_rejects_non_utf8_payloads(monkeypatch):
    monkeypatch.setattr(qr_module, "pyzbar_decode", lambda img: [SimpleNamespace(data=b"\xff\xfe\xfa")])
    buf = io.BytesIO()
    Image.new("RGB", (20, 20), "white").save(buf, format="PNG")
    buf.seek(0)
    with pytest.raises(ValidationError, match="QR code does not contain a pairing token"):
        decode_qr_image(buf)


def test_register_update_and_delete(world, people):
    kiosks = world.container.kiosk_service
    kiosk_id = kiosks.register_kiosk(
        actor_id=people["admin"], device_id="abcdef0123456789", location="Maple House", now=FIXED_NOW
    )
    assert world.kiosks.get_by_id(kiosk_id).name == "Kiosk abcdef01"

    with pytest.raises(ValidationError, match="Device ID already registered"):
        kiosks.register_kiosk(actor_id=people["admin"], device_id="abcdef0123456789", location="Maple House")

    assert kiosks.update_kiosk(actor_id=people["admin"], kiosk_id=kiosk_id) is False
    assert kiosks.update_kiosk(actor_id=people["admin"], kiosk_id=kiosk_id, location="Cedar House", status="retired")
    kiosk = world.kiosks.get_by_id(kiosk_id)
    assert kiosk.location == "Cedar House"
    assert kiosk.status == KioskStatus.RETIRED
    assert world.audit.entries[-1].details == f"kioskId={kiosk_id},fields=location,status"

    with pytest.raises(ValidationError, match="Status must be one of"):
        kiosks.update_kiosk_status(actor_id=people["admin"], kiosk_id=kiosk_id, status="broken")

    kiosks.update_kiosk_label(actor_id=people["admin"], kiosk_id=kiosk_id, device_label="Hall")
    assert kiosks.list_kiosks(actor_id=people["admin"])[0]["device_label"] == "Hall"

    assert kiosks.delete_kiosk(actor_id=people["admin"], kiosk_id=kiosk_id) is True
    assert world.audit.entries[-1].event == "kiosk_deleted"
    with pytest.raises(NotFoundError, match="Kiosk not found"):
        kiosks.delete_kiosk(actor_id=people["admin"], kiosk_id=kiosk_id)


def test_kiosk_clock_in(world, people):
    kiosks = world.container.kiosk_service
    kiosk_id = world.add_kiosk("kiosk-device-01", "Maple House")

    shift_id = kiosks.kiosk_clock_in(device_id="kiosk-device-01", user_id=people["staff"], now=FIXED_NOW)
    shift = world.shifts.shifts[shift_id]
    assert shift.kiosk_id == kiosk_id
    assert shift.location == "Maple House"
    assert shift.device_id == "kiosk-device-01"
    assert world.kiosks.get_by_id(kiosk_id).last_seen_at == FIXED_NOW


def test_kiosk_clock_in_requires_active_kiosk(world, people):
    kiosks = world.container.kiosk_service
    with pytest.raises(NotFoundError, match="Kiosk not registered"):
        kiosks.kiosk_clock_in(device_id="missing", user_id=people["staff"])

    kiosk_id = world.add_kiosk("kiosk-device-02", "Maple House")
    kiosks.deactivate_kiosk(actor_id=people["admin"], kiosk_id=kiosk_id)
    with pytest.raises(ValidationError, match="Kiosk is not active"):
        kiosks.kiosk_clock_in(device_id="kiosk-device-02", user_id=people["staff"])


def test_kiosk_side_lookup_and_audit(world, people):
    kiosks = world.container.kiosk_service
    world.add_kiosk("kiosk-device-03", "Cedar House")

    assert kiosks.get_kiosk_by_device("kiosk-device-03")["location"] == "Cedar House"
    assert kiosks.get_kiosk_by_device("nope") is None
    assert kiosks.update_kiosk_last_seen("kiosk-device-03", now=FIXED_NOW) is True
    assert kiosks.update_kiosk_last_seen("nope") is False

    kiosks.kiosk_log_audit(device_id="kiosk-device-03", event="kiosk_unlock", details="pin=ok", now=FIXED_NOW)
    entry = world.audit.entries[-1]
    assert entry.event == "kiosk_unlock"
    assert entry.location == "Cedar House"
    assert entry.device_id == "kiosk-device-03"


def test_kiosk_audit_accepts_only_kiosk_events(world, people):
    kiosks = world.container.kiosk_service
    world.add_kiosk("kiosk-device-04", "Maple House")
    before = len(world.audit.entries)

    with pytest.raises(ValidationError, match="Unknown kiosk event"):
        kiosks.kiosk_log_audit(device_id="kiosk-device-04", event="password_reset")
    with pytest.raises(ValidationError, match="Details must be at most"):
        kiosks.kiosk_log_audit(device_id="kiosk-device-04", event="selfie", details="x" * 501)
    with pytest.raises(NotFoundError):
        kiosks.kiosk_log_audit(device_id="unknown-device", event="selfie")
    assert len(world.audit.entries) == before

    kiosks.kiosk_log_audit(device_id="kiosk-device-04", event="auto-lock", now=FIXED_NOW)
    assert world.audit.entries[-1].event == "auto-lock"
