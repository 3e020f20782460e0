import json

import pytest

from qqproto.notify import (
    FriendPokeNotifyEvent,
    GrayTipInfo,
    GroupPokeNotifyEvent,
    GroupRedBagLuckyKingNotifyEvent,
    HonorType,
    MemberHonorChangedNotifyEvent,
    TipCommand,
    parse_special_title_update,
    parse_tip_commands,
    process_gray_tip,
)


def _poke(params):
    return GrayTipInfo(busi_type=12, busi_id=1061, templ_params=params)


def test_group_poke_event():
    events = process_gray_tip(100, 999, _poke([("uin_str1", "10"), ("uin_str2", "20")]))
    assert events == [GroupPokeNotifyEvent(group_code=100, sender=10, receiver=20)]
    assert events[0].from_id == 100


def test_group_poke_defaults_receiver_to_self():
    events = process_gray_tip(100, 999, _poke([("uin_str1", "10")]))
    assert events == [GroupPokeNotifyEvent(group_code=100, sender=10, receiver=999)]


def test_group_poke_without_sender_is_ignored():
    assert process_gray_tip(100, 999, _poke([("uin_str2", "20")])) == []
    assert process_gray_tip(100, 999, _poke([("uin_str1", "abc")])) == []


def test_other_business_is_not_a_poke():
    tip = GrayTipInfo(busi_type=12, busi_id=1, templ_params=[("uin_str1", "10")])
    assert process_gray_tip(100, 999, tip) == []


@pytest.mark.parametrize(
    "templ, honor",
    [
        (1052, HonorType.PERFORMER),
        (1053, HonorType.TALKATIVE),
        (1054, HonorType.TALKATIVE),
        (1067, HonorType.EMOTION),
    ],
)
def test_honor_templates(templ, honor):
    tip = GrayTipInfo(templ_id=templ, templ_params=[("nick", "alice"), ("uin", "42")])
    events = process_gray_tip(7, 1, tip)
    assert events == [MemberHonorChangedNotifyEvent(group_code=7, honor=honor, uin=42, nick="alice")]


def test_honor_content_mentions_badge():
    event = MemberHonorChangedNotifyEvent(group_code=7, honor=HonorType.TALKATIVE, uin=42, nick="alice")
    assert "龙王" in event.content
    assert "alice(42)" in event.content
    other = MemberHonorChangedNotifyEvent(group_code=7, honor=HonorType.LEGEND, uin=42, nick="alice")
    assert other.content == "ERROR"


def test_poke_and_lucky_king_content():
    assert FriendPokeNotifyEvent(sender=3, receiver=4).content == "3戳了戳4"
    assert FriendPokeNotifyEvent(sender=3, receiver=4).from_id == 3
    lucky = GroupRedBagLuckyKingNotifyEvent(group_code=1, sender=3, lucky_king=4)
    assert lucky.content == "3发的红包被领完, 4是运气王"
    assert lucky.from_id == 1


def test_parse_tip_commands_extracts_json():
    first = json.dumps({"cmd": 5, "data": "123", "text": "bob"})
    second = json.dumps({"cmd": 1, "text": "title"})
    content = f"<{first}>got<{second}>"
    assert parse_tip_commands(content) == [
        TipCommand(command=5, data="123", text="bob"),
        TipCommand(command=1, data="", text="title"),
    ]


def test_parse_tip_commands_skips_invalid():
    content = '<{"cmd":"x"}> and <{broken}> and <{"cmd":2}>'
    assert parse_tip_commands(content) == [TipCommand(command=2)]


def test_parse_tip_commands_handles_plain_text():
    assert parse_tip_commands(">}> plain <") == []


def test_special_title_update():
    content = '<{"cmd":5,"data":"123","text":"bob"}>获得群主授予的<{"cmd":1,"text":"title"}>头衔'
    event = parse_special_title_update(8, content)
    assert event.group_code == 8
    assert event.uin == 123
    assert event.new_title == "title"


def test_special_title_update_ignores_other_tips():
    assert parse_special_title_update(8, '<{"cmd":5,"data":"123"}>hello') is None
    assert parse_special_title_update(8, "") is None


def test_special_title_update_without_uin_raises():
    with pytest.raises(ValueError):
        parse_special_title_update(8, '<{"cmd":1,"text":"title"}>头衔')