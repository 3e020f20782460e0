"""Parsing and request bodies for the group web APIs: honors, notices and TTS."""

from __future__ import annotations

import html
import json
import re
from dataclasses import dataclass, field
from typing import Any, Optional, Union
from urllib.parse import quote_plus

from qqproto.notify import HonorType

_HONOR_RE = re.compile(r"window\.__INITIAL_STATE__\s*?=\s*?(\{.*\})")

_NOTICE_SETTINGS = '{"is_show_edit_card":0,"tip_window_type":1,"confirm_required":1}'


def _text(data: Union[str, bytes]) -> str:
    if isinstance(data, (bytes, bytearray, memoryview)):
        return bytes(data).decode("utf-8", "replace")
    return data


def _load(data: Union[str, bytes]) -> Any:
    try:
        return json.loads(_text(data))
    except ValueError as exc:
        raise ValueError(f"failed to unmarshal json: {exc}") from exc


def _obj(value: Any, name: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"failed to unmarshal json: {name} is not an object")
    return value


def _str(doc: dict, key: str) -> str:
    value = doc.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        raise ValueError(f"failed to unmarshal json: {key} is not a string")
    return value


def _int(doc: dict, key: str) -> int:
    value = doc.get(key)
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"failed to unmarshal json: {key} is not an integer")
    return value


def _list(doc: dict, key: str) -> list:
    value = doc.get(key)
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"failed to unmarshal json: {key} is not a list")
    return value


@dataclass
class HonorMemberInfo:
    """A member listed under a group honor."""

    uin: int = 0
    avatar: str = ""
    name: str = ""
    desc: str = ""

    @classmethod
    def _from_json(cls, value: Any) -> "HonorMemberInfo":
        doc = _obj(value, "member")
        return cls(
            uin=_int(doc, "uin"),
            avatar=_str(doc, "avatar"),
            name=_str(doc, "name"),
            desc=_str(doc, "desc"),
        )


@dataclass
class CurrentTalkative:
    """The member currently holding the talkative honor."""

    uin: int = 0
    day_count: int = 0
    avatar: str = ""
    name: str = ""

    @classmethod
    def _from_json(cls, value: Any) -> "CurrentTalkative":
        doc = _obj(value, "currentTalkative")
        return cls(
            uin=_int(doc, "uin"),
            day_count=_int(doc, "day_count"),
            avatar=_str(doc, "avatar"),
            name=_str(doc, "nick"),
        )


@dataclass
class GroupHonorInfo:
    """Honor lists of a group."""

    group_code: str = ""
    uin: str = ""
    type: Union[HonorType, int] = 0
    talkative_list: list[HonorMemberInfo] = field(default_factory=list)
    current_talkative: CurrentTalkative = field(default_factory=CurrentTalkative)
    actor_list: list[HonorMemberInfo] = field(default_factory=list)
    legend_list: list[HonorMemberInfo] = field(default_factory=list)
    strong_newbie_list: list[HonorMemberInfo] = field(default_factory=list)
    emotion_list: list[HonorMemberInfo] = field(default_factory=list)


@dataclass
class GroupNoticeImage:
    """An image attached to a group notice."""

    height: str = ""
    width: str = ""
    id: str = ""


@dataclass
class GroupNoticeMessage:
    """A group notice (announcement)."""

    notice_id: str = ""
    sender_id: int = 0
    publish_time: int = 0
    text: str = ""
    images: list[GroupNoticeImage] = field(default_factory=list)


def _members(doc: dict, key: str) -> list[HonorMemberInfo]:
    return [HonorMemberInfo._from_json(item) for item in _list(doc, key)]


def parse_group_honor_info(page: Union[str, bytes]) -> GroupHonorInfo:
    """Extract the honor lists from the initial state embedded in an honor page."""
    match = _HONOR_RE.search(_text(page))
    if match is None:
        raise ValueError("无匹配结果")
    try:
        value, _ = json.JSONDecoder().raw_decode(match.group(1))
    except ValueError as exc:
        raise ValueError(f"failed to unmarshal json: {exc}") from exc
    doc = _obj(value, "state")
    honor = _int(doc, "type")
    try:
        honor_type: Union[HonorType, int] = HonorType(honor)
    except ValueError:
        honor_type = honor
    return GroupHonorInfo(
        group_code=_str(doc, "gc"),
        uin=_str(doc, "uin"),
        type=honor_type,
        talkative_list=_members(doc, "talkativeList"),
        current_talkative=CurrentTalkative._from_json(doc.get("currentTalkative")),
        actor_list=_members(doc, "actorList"),
        legend_list=_members(doc, "legendList"),
        strong_newbie_list=_members(doc, "strongnewbieList"),
        emotion_list=_members(doc, "emotionList"),
    )


def _notice_image(value: Any) -> GroupNoticeImage:
    doc = _obj(value, "image")
    return GroupNoticeImage(height=_str(doc, "h"), width=_str(doc, "w"), id=_str(doc, "id"))


def _notice(value: Any) -> GroupNoticeMessage:
    doc = _obj(value, "feed")
    body = _obj(doc.get("msg"), "msg")
    return GroupNoticeMessage(
        notice_id=_str(doc, "fid"),
        sender_id=_int(doc, "u"),
        publish_time=_int(doc, "pubt"),
        text=_str(body, "text"),
        images=[_notice_image(item) for item in _list(body, "pics")],
    )


def parse_group_notices(data: Union[str, bytes]) -> list[GroupNoticeMessage]:
    """Parse a notice list response: the feeds first, then the pinned ones."""
    doc = _obj(_load(data), "response")
    return [_notice(item) for key in ("feeds", "inst") for item in _list(doc, key)]


def parse_notice_pic_upload(data: Union[str, bytes]) -> GroupNoticeImage:
    """Parse the response to a notice image upload."""
    doc = _obj(_load(data), "response")
    if _int(doc, "ec") != 0:
        raise RuntimeError(_str(doc, "em"))
    return _notice_image(_load(html.unescape(_str(doc, "id"))))


def parse_notice_send_response(data: Union[str, bytes]) -> str:
    """Return the id of a newly published notice."""
    return _str(_obj(_load(data), "response"), "new_fid")


def build_notice_body(
    group_code: int, bkn: int, text: str, image: Optional[GroupNoticeImage] = None
) -> str:
    """Form body that publishes a notice, with an uploaded image if given."""
    body = (
        f"qid={group_code}&bkn={bkn}&text={quote_plus(text, safe='')}"
        f"&pinned=0&type=1&settings={_NOTICE_SETTINGS}"
    )
    if image is not None:
        body += f"&pic={image.id}&imgWidth={image.width}&imgHeight={image.height}"
    return body


def build_delete_notice_body(fid: str, group_code: int, bkn: int) -> str:
    """Form body that deletes a notice."""
    return f"fid={fid}&qid={group_code}&bkn={bkn}&ft=23&op=1"


def split_tts_chunks(data: bytes) -> list[bytes]:
    """Split a chunked TTS response into its payloads.

    Each chunk is a hex length, CR LF, the payload and CR LF; a zero or
    unreadable length ends the stream.
    """
    data = bytes(data)
    chunks: list[bytes] = []
    pos = 0
    while True:
        end = data.find(b"\r", pos)
        if end < 0:
            raise ValueError("tts response is truncated")
        digits = data[pos:end].decode("ascii", "replace")
        pos = end + 2
        try:
            length = int(digits, 16)
        except ValueError:
            length = 0
        if length == 0:
            break
        if length < 0 or pos + length > len(data):
            raise ValueError("tts response is truncated")
        chunks.append(data[pos : pos + length])
        pos += length + 2
    return chunks