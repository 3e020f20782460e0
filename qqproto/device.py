"""Emulated device identity and its JSON device file."""

from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass, field
from typing import Any, Union

from qqproto.auth import ProtocolType

# JSON key and attribute name of every byte-string field that is copied
# from the device file only when the file gives a non-empty value.
_TEXT_FIELDS = (
    ("display", "display"),
    ("product", "product"),
    ("device", "device"),
    ("board", "board"),
    ("brand", "brand"),
    ("model", "model"),
    ("bootloader", "bootloader"),
    ("finger_print", "finger_print"),
    ("boot_id", "boot_id"),
    ("proc_version", "proc_version"),
    ("base_band", "base_band"),
    ("sim_info", "sim_info"),
    ("os_type", "os_type"),
    ("mac_address", "mac_address"),
    ("wifi_bssid", "wifi_bssid"),
    ("wifi_ssid", "wifi_ssid"),
    ("apn", "apn"),
    ("vendor_name", "vendor_name"),
    ("vendor_os_name", "vendor_os_name"),
)

_HEX_DIGITS = "0123456789abcdefABCDEF"


def _text(value: bytes) -> str:
    return bytes(value).decode("utf-8", "replace")


def _decode_hex(text: str) -> tuple[bytes, bool]:
    """Decode hex digit pairs; return the decoded prefix and whether all of it was valid."""
    out = bytearray()
    for start in range(0, len(text) - 1, 2):
        pair = text[start : start + 2]
        if not all(ch in _HEX_DIGITS for ch in pair):
            return bytes(out), False
        out.append(int(pair, 16))
    return bytes(out), len(text) % 2 == 0


def _field(doc: dict, name: str, kind: type, default: Any) -> Any:
    value = doc.get(name)
    if value is None:
        return default
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"failed to unmarshal json message: bad {name}")
    elif not isinstance(value, kind):
        raise ValueError(f"failed to unmarshal json message: bad {name}")
    return value


@dataclass
class OSVersion:
    """Operating system version of the emulated device."""

    incremental: bytes = b""
    release: bytes = b""
    code_name: bytes = b""
    sdk: int = 0


@dataclass
class Device:
    """Hardware and software identity presented to the server."""

    display: bytes = b""
    product: bytes = b""
    device: bytes = b""
    board: bytes = b""
    brand: bytes = b""
    model: bytes = b""
    bootloader: bytes = b""
    finger_print: bytes = b""
    boot_id: bytes = b""
    proc_version: bytes = b""
    base_band: bytes = b""
    sim_info: bytes = b""
    os_type: bytes = b""
    mac_address: bytes = b""
    ip_address: bytes = b""
    wifi_bssid: bytes = b""
    wifi_ssid: bytes = b""
    imsi_md5: bytes = b""
    imei: str = ""
    android_id: bytes = b""
    apn: bytes = b""
    vendor_name: bytes = b""
    vendor_os_name: bytes = b""
    guid: bytes = b""
    tgtgt_key: bytes = b""
    qimei16: str = ""
    qimei36: str = ""
    protocol: ProtocolType = ProtocolType.UNSET
    version: OSVersion = field(default_factory=OSVersion)

    def to_json(self) -> bytes:
        """Encode the device as a device file."""
        if len(self.ip_address) < 4:
            raise ValueError("device ip address must have 4 bytes")
        doc = {
            "display": _text(self.display),
            "product": _text(self.product),
            "device": _text(self.device),
            "board": _text(self.board),
            "model": _text(self.model),
            "finger_print": _text(self.finger_print),
            "boot_id": _text(self.boot_id),
            "proc_version": _text(self.proc_version),
            "protocol": int(self.protocol),
            "imei": self.imei,
            "brand": _text(self.brand),
            "bootloader": _text(self.bootloader),
            "base_band": _text(self.base_band),
            "version": {
                "incremental": _text(self.version.incremental),
                "release": _text(self.version.release),
                "codename": _text(self.version.code_name),
                "sdk": self.version.sdk,
            },
            "sim_info": _text(self.sim_info),
            "os_type": _text(self.os_type),
            "mac_address": _text(self.mac_address),
            "ip_address": list(self.ip_address[:4]),
            "wifi_bssid": _text(self.wifi_bssid),
            "wifi_ssid": _text(self.wifi_ssid),
            "imsi_md5": bytes(self.imsi_md5).hex(),
            "android_id": _text(self.android_id),
            "apn": _text(self.apn),
            "vendor_name": _text(self.vendor_name),
            "vendor_os_name": _text(self.vendor_os_name),
        }
        return json.dumps(doc, ensure_ascii=False, separators=(",", ":")).encode("utf-8")

    def read_json(self, data: Union[str, bytes]) -> None:
        """Load a device file over this device and derive new keys."""
        try:
            doc = json.loads(data)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"failed to unmarshal json message: {exc}") from exc
        if not isinstance(doc, dict):
            raise ValueError("failed to unmarshal json message: not an object")

        texts = {key: _field(doc, key, str, "") for key, _ in _TEXT_FIELDS}
        imsi = _field(doc, "imsi_md5", str, "")
        imei = _field(doc, "imei", str, "")
        android_id = _field(doc, "android_id", str, "")
        protocol = _field(doc, "protocol", int, 0)
        ip_address = _field(doc, "ip_address", list, [])
        if any(isinstance(x, bool) or not isinstance(x, int) for x in ip_address):
            raise ValueError("failed to unmarshal json message: bad ip_address")
        version = doc.get("version")
        if version is None:
            raise ValueError("device file has no version")
        if not isinstance(version, dict):
            raise ValueError("failed to unmarshal json message: bad version")
        os_version = OSVersion(
            incremental=_field(version, "incremental", str, "").encode(),
            release=_field(version, "release", str, "").encode(),
            code_name=_field(version, "codename", str, "").encode(),
            sdk=_field(version, "sdk", int, 0),
        )

        for key, attr in _TEXT_FIELDS:
            if texts[key]:
                setattr(self, attr, texts[key].encode())
        if len(ip_address) == 4:
            self.ip_address = bytes(x & 0xFF for x in ip_address)
        if imsi:
            decoded, valid = _decode_hex(imsi)
            if not valid:
                self.imsi_md5 = decoded
        if imei:
            self.imei = imei
        if android_id:
            self.android_id = android_id.encode()
        else:
            self.android_id = self.display

        self.protocol = (
            ProtocolType(protocol) if 1 <= protocol <= 6 else ProtocolType.ANDROID_PAD
        )
        self.version = os_version
        self.gen_new_guid()
        self.gen_new_tgtgt_key()

    def gen_new_guid(self) -> None:
        """Derive the device GUID from the Android id and MAC address."""
        self.guid = hashlib.md5(bytes(self.android_id) + bytes(self.mac_address)).digest()

    def gen_new_tgtgt_key(self) -> None:
        """Generate a fresh random TGTGT key bound to the GUID."""
        self.tgtgt_key = hashlib.md5(os.urandom(16) + bytes(self.guid)).digest()