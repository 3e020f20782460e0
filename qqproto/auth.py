"""Protocol types, application versions and session signatures."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import IntEnum, IntFlag
from typing import Any, Optional, Union


class ProtocolType(IntEnum):
    """Client protocol a session imitates."""

    UNSET = 0
    ANDROID_PHONE = 1
    ANDROID_WATCH = 2
    MACOS = 3
    QIDIAN = 4
    IPAD = 5
    ANDROID_PAD = 6

    def version(self) -> Optional["AppVersion"]:
        """Return the built-in application version for this protocol."""
        return APP_VERSIONS.get(self)

    def __str__(self) -> str:
        return _PROTOCOL_LABELS[self]


_PROTOCOL_LABELS = {
    ProtocolType.UNSET: "Unset",
    ProtocolType.ANDROID_PHONE: "Android Phone",
    ProtocolType.ANDROID_WATCH: "Android Watch",
    ProtocolType.MACOS: "MacOS",
    ProtocolType.QIDIAN: "企点",
    ProtocolType.IPAD: "iPad",
    ProtocolType.ANDROID_PAD: "Android Pad",
}


class SigType(IntFlag):
    """Signature bits requested at login."""

    WLOGIN_A5 = 1 << 1
    WLOGIN_RESERVED = 1 << 4
    WLOGIN_STWEB = 1 << 5
    WLOGIN_A2 = 1 << 6
    WLOGIN_ST = 1 << 7
    WLOGIN_LSKEY = 1 << 9
    WLOGIN_SKEY = 1 << 12
    WLOGIN_SIG64 = 1 << 13
    WLOGIN_OPENKEY = 1 << 14
    WLOGIN_TOKEN = 1 << 15
    WLOGIN_VKEY = 1 << 17
    WLOGIN_D2 = 1 << 18
    WLOGIN_SID = 1 << 19
    WLOGIN_PSKEY = 1 << 20
    WLOGIN_AQSIG = 1 << 21
    WLOGIN_LHSIG = 1 << 22
    WLOGIN_PAYTOKEN = 1 << 23
    WLOGIN_PF = 1 << 24
    WLOGIN_DA2 = 1 << 25
    WLOGIN_QRPUSH = 1 << 26
    WLOGIN_PT4_TOKEN = 1 << 27


def _hex_prefix(text: str) -> bytes:
    """Decode the longest valid run of hex digit pairs at the start of ``text``."""
    out = bytearray()
    for start in range(0, len(text) - 1, 2):
        try:
            out.append(int(text[start : start + 2], 16))
        except ValueError:
            break
        if not all(ch in "0123456789abcdefABCDEF" for ch in text[start : start + 2]):
            out.pop()
            break
    return bytes(out)


def _json_field(data: dict, name: str, kind: type, default: Any) -> Any:
    value = data.get(name)
    if value is None:
        return default
    if kind is int:
        if isinstance(value, bool) or not isinstance(value, int) or value < 0:
            raise ValueError(f"failed to unmarshal json message: bad {name}")
    elif not isinstance(value, kind):
        raise ValueError(f"failed to unmarshal json message: bad {name}")
    return value


@dataclass
class AppVersion:
    """Identity of the client application sent to the server."""

    apk_sign: bytes = b""
    apk_id: str = ""
    sort_version_name: str = ""
    sdk_version: str = ""
    app_id: int = 0
    sub_app_id: int = 0
    app_key: str = ""
    build_time: int = 0
    sso_version: int = 0
    misc_bitmap: int = 0
    sub_sigmap: int = 0
    main_sig_map: int = 0
    qua: str = ""
    protocol: Union[ProtocolType, int] = ProtocolType.UNSET

    def __str__(self) -> str:
        return f"{self.protocol} {self.sort_version_name}"

    def update_from_json(self, data: Union[str, bytes]) -> None:
        """Replace every field with the values of a version file."""
        try:
            doc = json.loads(data)
        except (ValueError, TypeError) as exc:
            raise ValueError(f"failed to unmarshal json message: {exc}") from exc
        if not isinstance(doc, dict):
            raise ValueError("failed to unmarshal json message: not an object")
        apk_sign = _json_field(doc, "apk_sign", str, "")
        protocol = _json_field(doc, "protocol_type", int, 0)
        values = dict(
            apk_id=_json_field(doc, "apk_id", str, ""),
            sort_version_name=_json_field(doc, "sort_version_name", str, ""),
            sdk_version=_json_field(doc, "sdk_version", str, ""),
            app_id=_json_field(doc, "app_id", int, 0),
            sub_app_id=_json_field(doc, "sub_app_id", int, 0),
            app_key=_json_field(doc, "app_key", str, ""),
            build_time=_json_field(doc, "build_time", int, 0),
            sso_version=_json_field(doc, "sso_version", int, 0),
            misc_bitmap=_json_field(doc, "misc_bitmap", int, 0),
            sub_sigmap=_json_field(doc, "sub_sig_map", int, 0),
            main_sig_map=_json_field(doc, "main_sig_map", int, 0),
            qua=_json_field(doc, "qua", str, ""),
        )
        self.apk_sign = _hex_prefix(apk_sign)
        for name, value in values.items():
            setattr(self, name, value)
        try:
            self.protocol = ProtocolType(protocol)
        except ValueError:
            self.protocol = protocol


_ANDROID_SIG_MAP = int(
    SigType.WLOGIN_A5
    | SigType.WLOGIN_RESERVED
    | SigType.WLOGIN_STWEB
    | SigType.WLOGIN_A2
    | SigType.WLOGIN_ST
    | SigType.WLOGIN_LSKEY
    | SigType.WLOGIN_SKEY
    | SigType.WLOGIN_SIG64
    | 1 << 16
    | SigType.WLOGIN_VKEY
    | SigType.WLOGIN_D2
    | SigType.WLOGIN_SID
    | SigType.WLOGIN_PSKEY
    | SigType.WLOGIN_AQSIG
    | SigType.WLOGIN_LHSIG
    | SigType.WLOGIN_PAYTOKEN
)

_APPLE_SIG_MAP = int(
    SigType.WLOGIN_STWEB
    | SigType.WLOGIN_A2
    | SigType.WLOGIN_ST
    | SigType.WLOGIN_SKEY
    | SigType.WLOGIN_VKEY
    | SigType.WLOGIN_D2
    | SigType.WLOGIN_SID
    | SigType.WLOGIN_PSKEY
)

_QIDIAN_SIG_MAP = int(
    SigType.WLOGIN_STWEB
    | SigType.WLOGIN_A2
    | SigType.WLOGIN_ST
    | SigType.WLOGIN_SKEY
    | SigType.WLOGIN_D2
    | SigType.WLOGIN_PSKEY
    | SigType.WLOGIN_DA2
)

_ANDROID_SIGN = bytes(
    [0xA6, 0xB7, 0x45, 0xBF, 0x24, 0xA2, 0xC2, 0x77, 0x52, 0x77, 0x16, 0xF6, 0xF3, 0x6E, 0xB6, 0x8D]
)
_APPLE_SIGN = bytes([170, 57, 120, 244, 31, 217, 111, 249, 145, 74, 102, 158, 24, 100, 116, 199])

APP_VERSIONS: dict[ProtocolType, AppVersion] = {
    ProtocolType.ANDROID_PHONE: AppVersion(
        apk_id="com.tencent.mobileqq",
        app_id=537164840,
        sub_app_id=537164840,
        app_key="0S200MNJT807V3GE",
        sort_version_name="8.9.63.11390",
        build_time=1685069178,
        apk_sign=_ANDROID_SIGN,
        sdk_version="6.0.0.2546",
        sso_version=20,
        misc_bitmap=150470524,
        sub_sigmap=0x10400,
        main_sig_map=_ANDROID_SIG_MAP,
        qua="V1_AND_SQ_8.9.63_4194_YYB_D",
        protocol=ProtocolType.ANDROID_PHONE,
    ),
    ProtocolType.ANDROID_PAD: AppVersion(
        apk_id="com.tencent.mobileqq",
        app_id=537164888,
        sub_app_id=537164888,
        app_key="0S200MNJT807V3GE",
        sort_version_name="8.9.63.11390",
        build_time=1685069178,
        apk_sign=_ANDROID_SIGN,
        sdk_version="6.0.0.2546",
        sso_version=20,
        misc_bitmap=150470524,
        sub_sigmap=0x10400,
        main_sig_map=_ANDROID_SIG_MAP,
        qua="V1_AND_SQ_8.9.63_4194_YYB_D",
        protocol=ProtocolType.ANDROID_PAD,
    ),
    ProtocolType.ANDROID_WATCH: AppVersion(
        apk_id="com.tencent.qqlite",
        app_id=537065138,
        sub_app_id=537065138,
        sort_version_name="2.0.8",
        build_time=1559564731,
        apk_sign=_ANDROID_SIGN,
        sdk_version="6.0.0.2365",
        sso_version=5,
        misc_bitmap=16252796,
        sub_sigmap=0x10400,
        main_sig_map=_ANDROID_SIG_MAP,
        protocol=ProtocolType.ANDROID_WATCH,
    ),
    ProtocolType.IPAD: AppVersion(
        apk_id="com.tencent.minihd.qq",
        app_id=537151363,
        sub_app_id=537151363,
        sort_version_name="8.9.33.614",
        build_time=1595836208,
        apk_sign=_APPLE_SIGN,
        sdk_version="6.0.0.2433",
        sso_version=19,
        misc_bitmap=150470524,
        sub_sigmap=66560,
        main_sig_map=_APPLE_SIG_MAP,
        protocol=ProtocolType.IPAD,
    ),
    ProtocolType.MACOS: AppVersion(
        apk_id="com.tencent.minihd.qq",
        app_id=537128930,
        sub_app_id=537128930,
        sort_version_name="5.8.9",
        build_time=1595836208,
        apk_sign=_APPLE_SIGN,
        sdk_version="6.0.0.2433",
        sso_version=12,
        misc_bitmap=150470524,
        sub_sigmap=66560,
        main_sig_map=_APPLE_SIG_MAP,
        protocol=ProtocolType.MACOS,
    ),
    ProtocolType.QIDIAN: AppVersion(
        apk_id="com.tencent.qidian",
        app_id=537096038,
        sub_app_id=537036590,
        sort_version_name="5.0.0",
        build_time=1630062176,
        apk_sign=bytes([160, 30, 236, 171, 133, 233, 227, 186, 43, 15, 106, 21, 140, 133, 92, 41]),
        sdk_version="6.0.0.2484",
        sso_version=18,
        misc_bitmap=184024956,
        sub_sigmap=66560,
        main_sig_map=_QIDIAN_SIG_MAP,
        protocol=ProtocolType.QIDIAN,
    ),
}


@dataclass
class SigInfo:
    """Tickets, keys and cached values of a logged-in session."""

    login_bitmap: int = 0
    tgt: bytes = b""
    tgt_key: bytes = b""
    srm_token: bytes = b""
    t133: bytes = b""
    encrypted_a1: bytes = b""
    user_st_key: bytes = b""
    user_st_web_sig: bytes = b""
    s_key: bytes = b""
    s_key_expired_time: int = 0
    d2: bytes = b""
    d2_key: bytes = b""
    device_token: bytes = b""
    ps_key_map: dict[str, bytes] = field(default_factory=dict)
    pt4_token_map: dict[str, bytes] = field(default_factory=dict)
    out_packet_session_id: bytes = b""
    dpwd: bytes = b""
    t104: bytes = b""
    t174: bytes = b""
    g: bytes = b""
    t402: bytes = b""
    rand_seed: bytes = b""
    t547: bytes = b""
    sync_cookie: bytes = b""
    pub_account_cookie: bytes = b""
    ksid: bytes = b""