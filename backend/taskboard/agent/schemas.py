# backend/taskboard/agent/schemas.py

"""
コマンド定義・実行結果のスキーマ定義。

format 文字列の ${name} がプレースホルダで、マッチ時に引数 dict のキーになる。
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Awaitable, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CommandResult(BaseModel):
    """コマンド 1 件分の実行結果。"""

    success: bool = Field(..., description="成功したかどうか")
    message: Optional[str] = Field(None, description="結果メッセージ（任意）")

    @classmethod
    def ok(cls, message: Optional[str] = None) -> "CommandResult":
        return cls(success=True, message=message)

    @classmethod
    def fail(cls, message: str) -> "CommandResult":
        return cls(success=False, message=message)


CommandFunction = Callable[[Dict[str, str]], Awaitable[CommandResult]]


class CommandType(str, Enum):
    """
    コマンド種別。

    - FUNCTION: Python の関数を呼び出す組み込みコマンド
    - SEQUENCE: 他コマンドの入力文字列を順に実行する合成コマンド
    """

    FUNCTION = "function"
    SEQUENCE = "sequence"


class CommandStep(BaseModel):
    """
    シーケンスコマンドの 1 ステップ。

    children はネストしたサブステップ（親の直後に順番どおり実行される）。
    """

    input: str
    children: List["CommandStep"] = Field(default_factory=list)

    @field_validator("children", mode="before")
    @classmethod
    def _coerce_children(cls, value: Any) -> Any:
        return _coerce_steps(value)


def _coerce_steps(value: Any) -> Any:
    # JSON 定義では単なる文字列でもステップとして扱う
    if isinstance(value, list):
        return [{"input": item} if isinstance(item, str) else item for item in value]
    return value


class CommandDefinition(BaseModel):
    """レジストリに登録されるコマンド定義。"""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    format: str = Field(..., description="例: 'notion:rename page ${id} to ${title}'")
    type: CommandType = CommandType.SEQUENCE
    description: Optional[str] = None
    requires_application: Optional[str] = Field(
        None,
        description="実行に必要なアプリケーション名（カタログの Requirements 欄に出す）",
    )
    sequence: Optional[List[CommandStep]] = None
    function: Optional[CommandFunction] = Field(None, exclude=True)
    requires_exact_match: bool = False

    @field_validator("sequence", mode="before")
    @classmethod
    def _coerce_sequence(cls, value: Any) -> Any:
        return _coerce_steps(value)


class CommandExecutable(BaseModel):
    """テキスト入力とコマンド定義の照合結果。"""

    command: CommandDefinition
    args: Dict[str, str] = Field(default_factory=dict)
    command_input: str
