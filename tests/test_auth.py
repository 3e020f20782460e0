import json
from functools import reduce
from operator import or_

import pytest

from qqproto.auth import AppVersion, ProtocolType, SigInfo, SigType


def test_builtin_android_phone_version():
    version = ProtocolType.ANDROID_PHONE.version()
    assert version.app_id == 537164840
    assert version.apk_id == "com.tencent.mobileqq"
    assert version.protocol is ProtocolType.ANDROID_PHONE


@pytest.mark.parametrize(
    "protocol, sig_map",
    [
        (ProtocolType.ANDROID_PHONE, 16724722),
        (ProtocolType.ANDROID_PAD, 16724722),
        (ProtocolType.ANDROID_WATCH, 16724722),
        (ProtocolType.IPAD, 1970400),
        (ProtocolType.MACOS, 1970400),
        (ProtocolType.QIDIAN, 34869472),
    ],
)
def test_main_sig_maps(protocol, sig_map):
    assert protocol.version().main_sig_map == sig_map


def test_unset_has_no_version():
    assert ProtocolType.UNSET.version() is None


def test_protocol_labels():
    assert str(ProtocolType.QIDIAN) == "企点"
    assert str(ProtocolType.IPAD) == "iPad"
    assert str(ProtocolType.ANDROID_PHONE.version()) == "Android Phone 8.9.63.11390"


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5, 6])
def test_every_version_matches_its_protocol(value):
    protocol = ProtocolType(value)
    version = protocol.version()
    assert version.protocol is protocol


@pytest.mark.parametrize("value", [1, 2, 3, 4, 5, 6])
def test_main_sig_maps_use_only_sig_type_bits(value):
    values = [int(flag) for flag in SigType]
    assert len(set(values)) == len(values)
    assert all(v & (v - 1) == 0 for v in values)
    allowed = reduce(or_, values) | (1 << 16)
    version = ProtocolType(value).version()
    assert version.main_sig_map & ~allowed == 0


def test_update_from_json_sets_all_fields():
    version = AppVersion()
    doc = {
        "apk_id": "com.example.app",
        "app_id": 537164840,
        "sub_app_id": 537164888,
        "app_key": "placeholder",
        "sort_version_name": "8.9.63.11390",
        "build_time": 1685069178,
        "apk_sign": "a6b745bf",
        "sdk_version": "6.0.0.2546",
        "sso_version": 20,
        "misc_bitmap": 150470524,
        "main_sig_map": 16724722,
        "sub_sig_map": 0x10400,
        "qua": "V1_AND_SQ_8.9.63_4194_YYB_D",
        "protocol_type": 6,
    }
    version.update_from_json(json.dumps(doc))
    assert version.apk_sign == bytes([0xA6, 0xB7, 0x45, 0xBF])
    assert version.apk_id == "com.example.app"
    assert version.sub_app_id == 537164888
    assert version.sub_sigmap == 0x10400
    assert version.main_sig_map == 16724722
    assert version.protocol is ProtocolType.ANDROID_PAD
    assert str(version) == "Android Pad 8.9.63.11390"


def test_update_from_json_resets_missing_fields():
    version = AppVersion(apk_id="com.example.app", app_id=537164840)
    version.update_from_json(b'{"sort_version_name": "5.0.0"}')
    assert version.apk_id == ""
    assert version.app_id == 0
    assert version.sort_version_name == "5.0.0"
    assert version.protocol is ProtocolType.UNSET


def test_update_from_json_keeps_valid_hex_prefix():
    version = AppVersion()
    version.update_from_json('{"apk_sign": "a6b7zz"}')
    assert version.apk_sign == bytes([0xA6, 0xB7])


def test_update_from_json_rejects_bad_input():
    version = AppVersion()
    with pytest.raises(ValueError):
        version.update_from_json("{not json")
    with pytest.raises(ValueError):
        version.update_from_json('{"app_id": "abc"}')


def test_sig_info_maps_are_independent():
    first = SigInfo()
    second = SigInfo()
    first.ps_key_map["qun.qq.com"] = b"token"
    assert second.ps_key_map == {}
    assert first.d2 == b""