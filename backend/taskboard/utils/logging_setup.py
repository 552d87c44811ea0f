# backend/taskboard/utils/logging_setup.py

"""
ロギング初期化。

- コンソール: 通常は WARNING 以上のみ。--debug 指定時は DEBUG まで出す
- ファイル: --log 指定時のみ、DEBUG 以上を taskboard.log に書き出す

CLI 起動直後に一度だけ呼ぶこと。
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

LOG_FILE_NAME = "taskboard.log"

_NOISY_LOGGERS = ("httpx", "httpcore", "uvicorn.access")


class _ThirdPartyNoiseFilter(logging.Filter):
    """サードパーティの HTTP ログはコンソールでは WARNING 以上のみ通す。"""

    def filter(self, record: logging.LogRecord) -> bool:
        if record.name.startswith(_NOISY_LOGGERS):
            return record.levelno >= logging.WARNING
        return True


def setup_logging(
    *,
    console_debug: bool = False,
    log_to_file: bool = False,
    log_dir: str | Path = ".local/taskboard",
) -> Path | None:
    """
    ルートロガーを構成する。

    :return: ファイル出力を有効にした場合はログファイルのパス
    """
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)

    # 二重登録を避けるため既存ハンドラを外す
    for handler in list(root.handlers):
        root.removeHandler(handler)

    fmt = logging.Formatter(
        fmt="%(asctime)s.%(msecs)03d %(levelname)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if console_debug else logging.WARNING)
    console.setFormatter(fmt)
    console.addFilter(_ThirdPartyNoiseFilter())
    root.addHandler(console)

    log_file: Path | None = None
    if log_to_file:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        log_file = log_path / LOG_FILE_NAME

        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)

    logging.captureWarnings(True)
    return log_file
