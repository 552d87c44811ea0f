# backend/taskboard/utils/config.py

"""
環境変数読み取り用のユーティリティ。

Notion / テキスト生成 / ワーカー設定の各 config.py から使う。
空文字列は未設定として扱う。
"""

import os
from typing import Callable, Optional, TypeVar

T = TypeVar("T")


class EnvVarMissingError(RuntimeError):
    """必須の環境変数がない。CLI ではそのまま利用者向けのエラーになる。"""

    def __init__(self, name: str) -> None:
        super().__init__(f"Required environment variable '{name}' is not set.")
        self.name = name


def get_env(
    name: str,
    default: Optional[str] = None,
    *,
    required: bool = True,
) -> Optional[str]:
    """
    環境変数 name の値を返す。

    :param default: 未設定時の値（required=False のときだけ使われる）
    :param required: True なら未設定で EnvVarMissingError
    """
    value = os.environ.get(name) or None
    if value is not None:
        return value
    if required:
        raise EnvVarMissingError(name)
    return default


def _get_env_as(name: str, default: T, parse: Callable[[str], T]) -> T:
    # 数値設定は読めなければデフォルトで動かす
    raw = get_env(name, required=False)
    if raw is None:
        return default
    try:
        return parse(raw.strip())
    except ValueError:
        return default


def get_env_float(name: str, default: float) -> float:
    return _get_env_as(name, default, float)


def get_env_int(name: str, default: int) -> int:
    return _get_env_as(name, default, int)
