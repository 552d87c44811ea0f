# backend/tests/test_notion_pages_plugin.py

import pytest

from taskboard.plugins.notion_pages import NotionPagePlugin

from .fakes import FakeNotionService


def test_plugin_is_disabled_without_database_id():
    plugin = NotionPagePlugin(FakeNotionService(), None)

    assert plugin.get_is_enabled() is False
    assert plugin.get_commands() == []


def test_delete_requires_exact_match():
    plugin = NotionPagePlugin(FakeNotionService(), "pages-db")

    formats = {c.format: c for c in plugin.get_commands()}
    assert formats["notion:delete page with id ${id}"].requires_exact_match is True
    assert formats["notion:rename page ${id} to ${title}"].requires_exact_match is False


@pytest.mark.asyncio
async def test_missing_arguments_fail_without_api_calls():
    notion = FakeNotionService()
    plugin = NotionPagePlugin(notion, "pages-db")

    assert (await plugin.add_page({})).message == "Page title not provided"
    assert (await plugin.rename_page({"title": "x"})).message == "id not provided"
    assert (await plugin.rename_page({"id": "x"})).message == "title not provided"
    assert (await plugin.update_page_status({"id": "x"})).message == "status not provided"
    assert (await plugin.comment_on_page({"id": "x"})).message == "comment not provided"
    assert (await plugin.delete_page({})).message == "id not provided"
    assert notion.calls == []


@pytest.mark.asyncio
async def test_add_page_uses_first_glyph_of_icon():
    notion = FakeNotionService()
    plugin = NotionPagePlugin(notion, "pages-db")

    result = await plugin.add_page({"title": "Ideas", "icon": "💡 bright"})

    assert result.success is True
    assert result.message == "Page created: https://www.notion.so/page1"
    assert notion.created_pages[0]["icon"] == "💡"
    assert notion.created_pages[0]["database_id"] == "pages-db"


@pytest.mark.asyncio
async def test_page_operations_delegate_to_service():
    notion = FakeNotionService()
    plugin = NotionPagePlugin(notion, "pages-db")

    await plugin.rename_page({"id": "p", "title": "New"})
    await plugin.update_page_status({"id": "p", "status": "Done"})
    await plugin.comment_on_page({"id": "p", "comment": "hi"})
    await plugin.delete_page({"id": "p"})

    assert notion.calls == [
        ("rename", "p", "New"),
        ("status", "p", "Done"),
        ("comment", "p", "hi"),
        ("archive", "p"),
    ]
