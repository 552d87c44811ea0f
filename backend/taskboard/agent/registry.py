# backend/taskboard/agent/registry.py

"""
コマンドレジストリ。

責務:
- プラグインが公開するコマンド定義を保持する
- テキスト入力を format 文字列と照合し、引数を取り出す
- 照合したコマンドを順番に実行し、最初の失敗で止める

照合はシンプルな正規表現ベース。${name} は「ダブルクォートで囲んだ値」
または「自由テキスト」にマッチする。あいまい検索は行わない。
"""

from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Pattern, Tuple

from .plugin import AgentPlugin
from .schemas import (
    CommandDefinition,
    CommandExecutable,
    CommandResult,
    CommandStep,
    CommandType,
)

logger = logging.getLogger(__name__)

_PLACEHOLDER_RE = re.compile(r"\$\{(\w+)\}")
_BULLET_RE = re.compile(r"^(?:[-*•]|\d+[.)])\s+")

MAX_SEQUENCE_DEPTH = 10


class CommandNotFoundError(LookupError):
    """入力テキストがどのコマンドにもマッチしない場合の例外。"""

    def __init__(self, command_input: str) -> None:
        super().__init__(f"Command not found: {command_input}")
        self.command_input = command_input


def _compile_format(fmt: str, exact: bool) -> Tuple[Pattern[str], List[str]]:
    """
    format 文字列を正規表現に変換する。

    最後のプレースホルダだけは貪欲マッチにして、残りのテキストをすべて受け取る。
    """
    parts = _PLACEHOLDER_RE.split(fmt)
    names: List[str] = []
    pattern = "^"

    for index, part in enumerate(parts):
        if index % 2 == 0:
            for token in re.split(r"(\s+)", part):
                if not token:
                    continue
                pattern += r"\s+" if token.isspace() else re.escape(token)
            continue

        names.append(part)
        is_last = index == len(parts) - 2 and not parts[-1].strip()
        free_text = ".+" if is_last else ".+?"
        pattern += f'(?:"(?P<{part}__q>[^"]*)"|(?P<{part}>{free_text}))'

    pattern += r"\s*$"
    flags = re.DOTALL if exact else re.DOTALL | re.IGNORECASE
    return re.compile(pattern, flags), names


def _substitute(text: str, args: Dict[str, str]) -> str:
    return _PLACEHOLDER_RE.sub(lambda m: args.get(m.group(1), m.group(0)), text)


class CommandRegistry:
    """
    コマンドの登録・照合・実行を担うレジストリ。

    - register_plugin() で有効なプラグインのコマンドをまとめて登録
    - match() / parse_command_input() でテキストからコマンドを特定
    - run_commands() で順に実行（最初の失敗で停止）
    """

    def __init__(self) -> None:
        self._commands: List[CommandDefinition] = []
        self._patterns: Dict[str, Tuple[Pattern[str], List[str]]] = {}

    def register_plugin(self, plugin: AgentPlugin) -> None:
        if not plugin.get_is_enabled():
            logger.info("Plugin %s is disabled; skipping registration", plugin.name)
            return
        for command in plugin.get_commands():
            self.register_command(command)
        logger.debug("Registered plugin %s v%s", plugin.name, plugin.version)

    def register_command(self, command: CommandDefinition) -> None:
        if command.type == CommandType.FUNCTION and command.function is None:
            raise ValueError(f"Function command has no function: {command.format}")

        # 同じ format は後勝ちで上書き
        self._commands = [c for c in self._commands if c.format != command.format]
        self._commands.append(command)
        self._patterns[command.format] = _compile_format(
            command.format, command.requires_exact_match
        )

    def register_commands(self, commands: Iterable[CommandDefinition]) -> None:
        for command in commands:
            self.register_command(command)

    def get_command_from_format(self, fmt: str) -> Optional[CommandDefinition]:
        for command in self._commands:
            if command.format == fmt:
                return command
        return None

    def get_all_command_formats(self) -> List[str]:
        return [command.format for command in self._commands]

    def match(self, text: str) -> Optional[CommandExecutable]:
        """テキストにマッチする最初のコマンドを返す。"""
        command_input = text.strip()
        for command in self._commands:
            pattern, names = self._patterns[command.format]
            m = pattern.match(command_input)
            if m is None:
                continue

            args: Dict[str, str] = {}
            for name in names:
                quoted = m.group(f"{name}__q")
                value = quoted if quoted is not None else m.group(name)
                args[name] = (value or "").strip()

            return CommandExecutable(command=command, args=args, command_input=command_input)
        return None

    def parse_command_input(self, text: str) -> List[CommandExecutable]:
        """
        複数行のテキストを 1 行 1 コマンドとして解釈する。

        箇条書きの記号は取り除く。1 行でもマッチしなければ CommandNotFoundError。
        """
        executables: List[CommandExecutable] = []
        for raw_line in text.splitlines():
            line = _BULLET_RE.sub("", raw_line.strip())
            if not line:
                continue
            executable = self.match(line)
            if executable is None:
                raise CommandNotFoundError(line)
            executables.append(executable)

        if not executables:
            raise CommandNotFoundError(text)
        return executables

    @staticmethod
    def get_command_input_string(executable: CommandExecutable) -> str:
        return executable.command_input

    async def run_commands(self, commands: List[str]) -> CommandResult:
        """
        コマンドを順番に実行する。

        失敗した時点でその結果を返す。すべて成功した場合は最後の結果を返す。
        """
        return await self._run_commands(commands, depth=0)

    async def _run_commands(self, commands: List[str], *, depth: int) -> CommandResult:
        result = CommandResult.ok()
        for text in commands:
            executable = self.match(text)
            if executable is None:
                return CommandResult.fail(f"Command not found: {text}")

            result = await self._execute(executable, depth=depth)
            if not result.success:
                return result
        return result

    async def _execute(self, executable: CommandExecutable, *, depth: int) -> CommandResult:
        command = executable.command
        logger.debug("Running command %r with args=%s", command.format, executable.args)

        if command.type == CommandType.FUNCTION:
            try:
                return await command.function(executable.args)  # type: ignore[misc]
            except Exception as exc:  # noqa: BLE001 - コマンドの失敗は結果として返す
                logger.exception("Command %r raised", command.format)
                return CommandResult.fail(str(exc) or exc.__class__.__name__)

        if depth >= MAX_SEQUENCE_DEPTH:
            return CommandResult.fail(f"Command sequence too deep: {command.format}")

        result = CommandResult.ok()
        for step in command.sequence or []:
            result = await self._run_step(step, executable.args, depth=depth + 1)
            if not result.success:
                return result
        return result

    async def _run_step(
        self,
        step: CommandStep,
        args: Dict[str, str],
        *,
        depth: int,
    ) -> CommandResult:
        # 親ステップ → 子ステップの順（深さ優先）
        result = await self._run_commands([_substitute(step.input, args)], depth=depth)
        if not result.success:
            return result

        for child in step.children:
            result = await self._run_step(child, args, depth=depth)
            if not result.success:
                return result
        return result


def load_command_definitions(path: str | Path) -> List[CommandDefinition]:
    """
    JSON ファイルからシーケンスコマンドの定義を読み込む。

    形式: [{"format": "...", "description": "...", "sequence": ["...", {"input": "...", "children": [...]}]}]
    """
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(raw, list):
        raise ValueError(f"Command definitions must be a JSON list: {path}")

    commands: List[CommandDefinition] = []
    for item in raw:
        definition = CommandDefinition.model_validate(item)
        if definition.type != CommandType.SEQUENCE:
            raise ValueError(f"Only sequence commands can be loaded from file: {definition.format}")
        commands.append(definition)
    return commands
