# backend/tests/test_command_registry.py

from __future__ import annotations

import json
from typing import Dict, List

import pytest

from taskboard.agent.registry import (
    CommandNotFoundError,
    CommandRegistry,
    load_command_definitions,
)
from taskboard.agent.schemas import CommandDefinition, CommandResult, CommandType


class RecordingPlugin:
    name = "recording"
    description = "records calls"
    version = "0.0.1"

    def __init__(self, enabled: bool = True) -> None:
        self.enabled = enabled
        self.calls: List[tuple] = []

    def get_is_enabled(self) -> bool:
        return self.enabled

    def get_commands(self) -> List[CommandDefinition]:
        return [
            CommandDefinition(
                format="say ${text}",
                type=CommandType.FUNCTION,
                function=self.say,
            ),
            CommandDefinition(
                format="rename page ${id} to ${title}",
                type=CommandType.FUNCTION,
                function=self.rename,
            ),
            CommandDefinition(
                format="fail with ${reason}",
                type=CommandType.FUNCTION,
                function=self.fail,
            ),
            CommandDefinition(
                format="explode",
                type=CommandType.FUNCTION,
                function=self.explode,
            ),
            CommandDefinition(
                format="delete page with id ${id}",
                type=CommandType.FUNCTION,
                function=self.rename,
                requires_exact_match=True,
            ),
        ]

    async def say(self, args: Dict[str, str]) -> CommandResult:
        self.calls.append(("say", args["text"]))
        return CommandResult.ok(f"said {args['text']}")

    async def rename(self, args: Dict[str, str]) -> CommandResult:
        self.calls.append(("rename", args))
        return CommandResult.ok()

    async def fail(self, args: Dict[str, str]) -> CommandResult:
        self.calls.append(("fail", args["reason"]))
        return CommandResult.fail(args["reason"])

    async def explode(self, args: Dict[str, str]) -> CommandResult:
        raise RuntimeError("kaboom")


@pytest.fixture
def plugin() -> RecordingPlugin:
    return RecordingPlugin()


@pytest.fixture
def registry(plugin: RecordingPlugin) -> CommandRegistry:
    registry = CommandRegistry()
    registry.register_plugin(plugin)
    return registry


def test_match_extracts_free_text_and_quoted_arguments(registry):
    executable = registry.match("rename page abc-123 to My new title")
    assert executable.command.format == "rename page ${id} to ${title}"
    assert executable.args == {"id": "abc-123", "title": "My new title"}

    quoted = registry.match('rename page "page to rename" to "Final"')
    assert quoted.args == {"id": "page to rename", "title": "Final"}


def test_match_is_case_insensitive_unless_exact(registry):
    assert registry.match("SAY hello") is not None
    assert registry.match("delete page with id x") is not None
    assert registry.match("DELETE page with id x") is None
    assert registry.match("something else") is None


def test_disabled_plugin_contributes_nothing():
    registry = CommandRegistry()
    registry.register_plugin(RecordingPlugin(enabled=False))

    assert registry.get_all_command_formats() == []


def test_parse_command_input_one_command_per_line(registry):
    executables = registry.parse_command_input("- say one\n\n2. say two\n")

    assert [registry.get_command_input_string(e) for e in executables] == ["say one", "say two"]


def test_parse_command_input_raises_on_unknown_line(registry):
    with pytest.raises(CommandNotFoundError):
        registry.parse_command_input("say one\nwrite a poem about cats")

    with pytest.raises(CommandNotFoundError):
        registry.parse_command_input("   ")


@pytest.mark.asyncio
async def test_run_commands_stops_at_first_failure(registry, plugin):
    result = await registry.run_commands(["say a", "fail with nope", "say b"])

    assert result == CommandResult.fail("nope")
    assert plugin.calls == [("say", "a"), ("fail", "nope")]


@pytest.mark.asyncio
async def test_run_commands_returns_last_result(registry):
    result = await registry.run_commands(["say a", "say b"])

    assert result.success is True
    assert result.message == "said b"


@pytest.mark.asyncio
async def test_unknown_command_and_raising_function_become_failures(registry):
    missing = await registry.run_commands(["dance"])
    assert missing.success is False
    assert "Command not found" in missing.message

    exploded = await registry.run_commands(["explode"])
    assert exploded.success is False
    assert exploded.message == "kaboom"


@pytest.mark.asyncio
async def test_sequence_runs_parent_before_children_with_substitution(registry, plugin):
    registry.register_command(
        CommandDefinition.model_validate(
            {
                "format": "greet ${name}",
                "sequence": [
                    {"input": "say hello ${name}", "children": ["say nested ${name}"]},
                    "say bye",
                ],
            }
        )
    )

    result = await registry.run_commands(["greet Ada"])

    assert result.success is True
    assert plugin.calls == [("say", "hello Ada"), ("say", "nested Ada"), ("say", "bye")]


@pytest.mark.asyncio
async def test_self_referencing_sequence_is_bounded(registry):
    registry.register_command(
        CommandDefinition(format="loop forever", sequence=[{"input": "loop forever"}])
    )

    result = await registry.run_commands(["loop forever"])

    assert result.success is False
    assert "too deep" in result.message


def test_function_command_requires_function():
    with pytest.raises(ValueError):
        CommandRegistry().register_command(
            CommandDefinition(format="broken", type=CommandType.FUNCTION)
        )


def test_load_command_definitions(tmp_path):
    path = tmp_path / "commands.json"
    path.write_text(
        json.dumps(
            [
                {
                    "format": "open project ${name}",
                    "description": "Open a project",
                    "requires_application": "VS Code",
                    "sequence": ["say opening", {"input": "say ${name}", "children": ["say done"]}],
                }
            ]
        ),
        encoding="utf-8",
    )

    (definition,) = load_command_definitions(path)

    assert definition.type == CommandType.SEQUENCE
    assert definition.requires_application == "VS Code"
    assert [s.input for s in definition.sequence] == ["say opening", "say ${name}"]
    assert definition.sequence[1].children[0].input == "say done"


def test_load_command_definitions_rejects_non_list(tmp_path):
    path = tmp_path / "commands.json"
    path.write_text(json.dumps({"format": "x"}), encoding="utf-8")

    with pytest.raises(ValueError):
        load_command_definitions(path)
