# backend/tests/test_blocks.py

import pytest

from taskboard.agent.schemas import CommandStep
from taskboard.notion import blocks


@pytest.mark.parametrize(
    ("text", "expected"),
    [
        ("🚀 launch", "🚀"),
        ("\U0001F469\u200d\U0001F4BB coder", "\U0001F469\u200d\U0001F4BB"),
        ("\U0001F44D\U0001F3FD thumbs", "\U0001F44D\U0001F3FD"),
        ("\U0001F1EF\U0001F1F5\U0001F1FA\U0001F1F8", "\U0001F1EF\U0001F1F5"),
        ("  📝", "📝"),
        ("abc", "a"),
        ("", ""),
    ],
)
def test_first_glyph_respects_grapheme_boundaries(text, expected):
    assert blocks.first_glyph(text) == expected


def test_normalize_quotes_replaces_stylized_double_quotes():
    assert blocks.normalize_quotes("say “hi” and „bye‟") == 'say "hi" and "bye"'
    assert blocks.normalize_quotes("it's 'single'") == "it's 'single'"


def test_to_do_with_link_and_empty_to_do():
    block = blocks.to_do("notion:comment x on page y", "https://www.notion.so/abc")

    assert block["type"] == "to_do"
    assert block["to_do"]["checked"] is False
    assert block["to_do"]["rich_text"] == [
        {
            "type": "text",
            "text": {"content": "notion:comment x on page y", "link": {"url": "https://www.notion.so/abc"}},
        }
    ]
    assert blocks.to_do("")["to_do"]["rich_text"] == []


def test_steps_to_bulleted_list_nests_children():
    steps = [
        CommandStep(input="parent", children=[CommandStep(input="child 1"), CommandStep(input="child 2")]),
        CommandStep(input="sibling"),
    ]

    result = blocks.steps_to_bulleted_list(steps)

    assert [blocks.plain_text(b["bulleted_list_item"]["rich_text"]) for b in result] == ["parent", "sibling"]
    children = result[0]["bulleted_list_item"]["children"]
    assert [blocks.plain_text(c["bulleted_list_item"]["rich_text"]) for c in children] == ["child 1", "child 2"]
    assert "children" not in result[1]["bulleted_list_item"]


def test_split_children_detaches_without_mutating_original():
    block = blocks.bulleted_list_item("parent", [blocks.bulleted_list_item("child")])

    parent, children = blocks.split_children(block)

    assert "children" not in parent["bulleted_list_item"]
    assert len(children) == 1
    assert "children" in block["bulleted_list_item"]


def test_notion_url_strips_dashes():
    assert blocks.notion_url("1234-abcd-5678") == "https://www.notion.so/1234abcd5678"
