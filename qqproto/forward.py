"""Display XML of forwarded chat records."""

from __future__ import annotations


def forward_display(res_id: str, file_name: str, preview: str, summary: str) -> str:
    """Build the card XML shown for a forwarded chat record."""
    parts = [
        "<?xml version='1.0' encoding='UTF-8'?><msg serviceID=\"35\" templateID=\"1\" "
        'action="viewMultiMsg" brief="[聊天记录]" '
    ]
    if res_id:
        parts.append(f'm_resid="{res_id}" ')
    parts.append(
        f'm_fileName="{file_name}" tSum="3" sourceMsgId="0" url="" flag="3" adverSign="0" '
        'multiMsgFlag="0"><item layout="1"><title color="#000000" size="34">群聊的聊天记录</title> '
    )
    parts.append(preview)
    parts.append('<hr></hr><summary size="26" color="#808080">')
    parts.append(summary)
    parts.append('</summary></item><source name="聊天记录"></source></msg>')
    return "".join(parts)


def forward_preview_line(sender: str, brief: str) -> str:
    """One preview line of a forwarded record."""
    return f'<title size="26" color="#777777">{sender}: {brief}</title>'


def forward_summary(count: int) -> str:
    """Summary text giving the number of forwarded messages."""
    return f"查看 {count} 条转发消息"