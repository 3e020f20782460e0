"""Music share card applications and URL safety levels."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Union


class MusicType(IntEnum):
    """Music platforms a share card can come from."""

    QQ = 0
    NETEASE = 1
    MIGU = 2
    KUGOU = 3
    KUWO = 4


@dataclass(frozen=True)
class MusicTypeInfo:
    """Application identity used when sending a music share card."""

    app_id: int
    app_type: int
    platform: int
    sdk_version: str
    package_name: str
    signature: str


_MUSIC_TYPES = {
    MusicType.QQ: MusicTypeInfo(
        app_id=100497308,
        app_type=1,
        platform=1,
        sdk_version="0.0.0",
        package_name="com.tencent.qqmusic",
        signature="cbd27cd7c861227d013a25b2d10f0799",
    ),
    MusicType.NETEASE: MusicTypeInfo(
        app_id=100495085,
        app_type=1,
        platform=1,
        sdk_version="0.0.0",
        package_name="com.netease.cloudmusic",
        signature="da6b069da1e2982db3e386233f68d76d",
    ),
    MusicType.MIGU: MusicTypeInfo(
        app_id=1101053067,
        app_type=1,
        platform=1,
        sdk_version="0.0.0",
        package_name="cmccwm.mobilemusic",
        signature="6cdc72a439cef99a3418d2a78aa28c73",
    ),
    MusicType.KUGOU: MusicTypeInfo(
        app_id=205141,
        app_type=1,
        platform=1,
        sdk_version="0.0.0",
        package_name="com.kugou.android",
        signature="fe4a24d80fcf253a00676a808f62c2c6",
    ),
    MusicType.KUWO: MusicTypeInfo(
        app_id=100243533,
        app_type=1,
        platform=1,
        sdk_version="0.0.0",
        package_name="cn.kuwo.player",
        signature="bf9ff4ffb4c558a34ee3fd52c223ebf5",
    ),
}

_STYLE_PLAIN = 0
_STYLE_WITH_MUSIC = 4


class UrlSecurityLevel(IntEnum):
    """Result of a server-side URL safety check."""

    SAFE = 1
    UNKNOWN = 2
    DANGER = 3


def music_info(music_type: Union[MusicType, int]) -> MusicTypeInfo:
    """Return the application identity for a music platform."""
    try:
        return _MUSIC_TYPES[MusicType(music_type)]
    except ValueError as exc:
        raise ValueError(f"unknown music type: {music_type!r}") from exc


def message_style(music_url: str) -> int:
    """Card style: 4 when the card carries a playable URL, else 0."""
    if music_url:
        return _STYLE_WITH_MUSIC
    return _STYLE_PLAIN