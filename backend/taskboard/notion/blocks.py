# backend/taskboard/notion/blocks.py

"""
Notion ブロック JSON の組み立てヘルパー。

API に渡す dict をそのまま返す。テキストは 1 つの rich_text 要素にまとめる。
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

import regex

from taskboard.agent.schemas import CommandStep

Block = Dict[str, Any]

DEFAULT_PAGE_ICON = "📝"
COMMAND_PAGE_ICON = "🧑‍💻"

_QUOTE_TABLE = str.maketrans({"“": '"', "”": '"', "„": '"', "‟": '"'})
_GRAPHEME_RE = regex.compile(r"\X")


def rich_text(content: str, url: Optional[str] = None) -> List[Dict[str, Any]]:
    if not content:
        return []
    text: Dict[str, Any] = {"content": content}
    if url:
        text["link"] = {"url": url}
    return [{"type": "text", "text": text}]


def plain_text(items: Optional[Iterable[Dict[str, Any]]]) -> str:
    """rich_text 配列をプレーンテキストに戻す。"""
    parts: List[str] = []
    for item in items or []:
        text = item.get("plain_text")
        if not isinstance(text, str):
            text = (item.get("text") or {}).get("content", "")
        parts.append(text or "")
    return "".join(parts)


def heading(content: str) -> Block:
    return {
        "object": "block",
        "type": "heading_2",
        "heading_2": {"rich_text": rich_text(content)},
    }


def paragraph(content: str) -> Block:
    return {
        "object": "block",
        "type": "paragraph",
        "paragraph": {"rich_text": rich_text(content)},
    }


def bulleted_list_item(content: str, children: Optional[List[Block]] = None) -> Block:
    body: Dict[str, Any] = {"rich_text": rich_text(content)}
    if children:
        body["children"] = children
    return {
        "object": "block",
        "type": "bulleted_list_item",
        "bulleted_list_item": body,
    }


def to_do(content: str, url: Optional[str] = None, *, checked: bool = False) -> Block:
    return {
        "object": "block",
        "type": "to_do",
        "to_do": {"rich_text": rich_text(content, url), "checked": checked},
    }


def steps_to_bulleted_list(steps: Iterable[CommandStep]) -> List[Block]:
    """
    シーケンスのステップを入れ子の箇条書きブロックに変換する。

    子ステップは親ブロックの children に入る。
    """
    return [
        bulleted_list_item(step.input, steps_to_bulleted_list(step.children) or None)
        for step in steps
    ]


def split_children(block: Block) -> tuple[Block, List[Block]]:
    """
    ブロックから children を取り外し、(children なしのブロック, children) を返す。

    Notion は深い入れ子を 1 回の呼び出しで作成できないため、
    親を作ってから子を 1 つずつ追加するのに使う。
    """
    block_type = block.get("type", "")
    body = dict(block.get(block_type) or {})
    children = list(body.pop("children", None) or [])
    return {**block, block_type: body}, children


def first_glyph(text: str) -> str:
    """
    文字列の先頭の 1 書記素クラスタ（見た目上の 1 文字）を返す。

    ZWJ で結合した絵文字や肌色修飾子も 1 文字として扱う。
    """
    m = _GRAPHEME_RE.match(text.strip())
    return m.group(0) if m else ""


def normalize_quotes(text: str) -> str:
    """装飾されたダブルクォート（“ ” „ ‟）を " に置き換える。"""
    return text.translate(_QUOTE_TABLE)


def notion_url(page_id: str) -> str:
    return f"https://www.notion.so/{page_id.replace('-', '')}"
