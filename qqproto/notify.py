"""Group and friend notification events decoded from gray tips."""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Union

_INT64_MIN = -(1 << 63)
_INT64_MAX = (1 << 63) - 1
_DECIMAL = re.compile(r"[+-]?[0-9]+")


class HonorType(IntEnum):
    """Group honor badges."""

    TALKATIVE = 1
    PERFORMER = 2
    LEGEND = 3
    STRONG_NEWBIE = 5
    EMOTION = 6


def _parse_int(text: str) -> int:
    if not _DECIMAL.fullmatch(text):
        return 0
    return max(_INT64_MIN, min(_INT64_MAX, int(text)))


@dataclass
class GroupPokeNotifyEvent:
    """A member poked another member in a group."""

    group_code: int
    sender: int
    receiver: int

    @property
    def from_id(self) -> int:
        return self.group_code

    @property
    def content(self) -> str:
        return f"{self.sender}戳了戳{self.receiver}"


@dataclass
class GroupRedBagLuckyKingNotifyEvent:
    """All of a red packet was taken; one member got the largest share."""

    group_code: int
    sender: int
    lucky_king: int

    @property
    def from_id(self) -> int:
        return self.group_code

    @property
    def content(self) -> str:
        return f"{self.sender}发的红包被领完, {self.lucky_king}是运气王"


@dataclass
class MemberHonorChangedNotifyEvent:
    """A member gained a group honor."""

    group_code: int
    honor: Union[HonorType, int]
    uin: int
    nick: str

    @property
    def from_id(self) -> int:
        return self.group_code

    @property
    def content(self) -> str:
        if self.honor == HonorType.TALKATIVE:
            return (
                f"昨日 {self.nick}({self.uin}) 在群 {self.group_code} 内发言最积极, "
                "获得 龙王 标识。"
            )
        if self.honor == HonorType.PERFORMER:
            return (
                f"{self.nick}({self.uin}) 在群 {self.group_code} 里连续发消息超过7天, "
                "获得 群聊之火 标识。"
            )
        if self.honor == HonorType.EMOTION:
            return (
                f"{self.nick}({self.uin}) 在群聊 {self.group_code} 中连续发表情包超过3天，"
                "且累计数量超过20条，获得 快乐源泉 标识。"
            )
        return "ERROR"


@dataclass
class MemberSpecialTitleUpdatedEvent:
    """A member's special title changed."""

    group_code: int
    uin: int = 0
    new_title: str = ""


@dataclass
class FriendPokeNotifyEvent:
    """A friend poked someone."""

    sender: int
    receiver: int

    @property
    def from_id(self) -> int:
        return self.sender

    @property
    def content(self) -> str:
        return f"{self.sender}戳了戳{self.receiver}"


@dataclass
class GrayTipInfo:
    """A general gray tip: business ids, template id and template parameters."""

    busi_type: int = 0
    busi_id: int = 0
    templ_id: int = 0
    templ_params: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class TipCommand:
    """One command embedded in an AIO gray tip text."""

    command: int = 0
    data: str = ""
    text: str = ""


GrayTipEvent = Union[GroupPokeNotifyEvent, MemberHonorChangedNotifyEvent]

_HONOR_BY_TEMPLATE = {
    1052: HonorType.PERFORMER,
    1053: HonorType.TALKATIVE,
    1054: HonorType.TALKATIVE,
    1067: HonorType.EMOTION,
}


def process_gray_tip(group_code: int, self_uin: int, tip: GrayTipInfo) -> list[GrayTipEvent]:
    """Turn a group gray tip into the notify events it announces."""
    events: list[GrayTipEvent] = []
    if tip.busi_type == 12 and tip.busi_id == 1061:
        sender = 0
        receiver = self_uin
        for name, value in tip.templ_params:
            if name == "uin_str1":
                sender = _parse_int(value)
            if name == "uin_str2":
                receiver = _parse_int(value)
        if sender != 0:
            events.append(GroupPokeNotifyEvent(group_code, sender, receiver))
    honor = _HONOR_BY_TEMPLATE.get(tip.templ_id)
    if honor is not None:
        nick = ""
        uin = 0
        for name, value in tip.templ_params:
            if name == "nick":
                nick = value
            if name == "uin":
                uin = _parse_int(value)
        events.append(MemberHonorChangedNotifyEvent(group_code, honor, uin, nick))
    return events


def _tip_command(raw: str) -> Optional[TipCommand]:
    try:
        doc = json.loads(raw)
    except ValueError:
        return None
    if not isinstance(doc, dict):
        return None
    command = doc.get("cmd")
    data = doc.get("data")
    text = doc.get("text")
    if command is not None and (isinstance(command, bool) or not isinstance(command, int)):
        return None
    if data is not None and not isinstance(data, str):
        return None
    if text is not None and not isinstance(text, str):
        return None
    return TipCommand(command=command or 0, data=data or "", text=text or "")


def parse_tip_commands(content: str) -> list[TipCommand]:
    """Extract the ``<{...}>`` JSON commands of a gray tip text, skipping bad ones."""
    commands: list[TipCommand] = []
    start = -1
    for i, ch in enumerate(content):
        if ch == "<" and content[i + 1 : i + 2] == "{":
            start = i + 1
        if ch == ">" and i > 0 and content[i - 1] == "}" and start != -1:
            command = _tip_command(content[start:i])
            if command is not None:
                commands.append(command)
            start = -1
    return commands


def parse_special_title_update(
    group_code: int, content: str
) -> Optional[MemberSpecialTitleUpdatedEvent]:
    """Read a special-title update from an AIO gray tip, or None if it is not one."""
    if not content or "头衔" not in content:
        return None
    event = MemberSpecialTitleUpdatedEvent(group_code=group_code)
    for command in parse_tip_commands(content):
        if command.command == 5:
            event.uin = _parse_int(command.data)
        if command.command == 1:
            event.new_title = command.text
    if event.uin == 0:
        raise ValueError("process special title updated tips error: missing cmd")
    return event