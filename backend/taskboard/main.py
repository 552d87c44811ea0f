# backend/taskboard/main.py

"""
ワーカーのエントリーポイント。

- CLI 引数 / 環境変数（.env 含む）から設定を組み立てる
- Notion クライアント・コマンドレジストリ・プラグイン・通知を配線する
- タスクボードのポーリングを開始し、プロセスが終了するまで動き続ける
- --port 指定時のみ、ステータス API（/health, /worker/status）を同じイベントループで公開する

例:
    python -m taskboard.main --tasks-db <id> --commands-db <id> --name agent-1 --debug
"""

from __future__ import annotations

import argparse
import asyncio
import logging
from typing import List, Optional

from dotenv import load_dotenv
from fastapi import FastAPI

from taskboard import __version__
from taskboard.agent.registry import CommandRegistry, load_command_definitions
from taskboard.ai.client import TextCompletionClient
from taskboard.api.worker_status import router as worker_router
from taskboard.automation.config import WorkerSettings, get_worker_settings
from taskboard.automation.poller import TaskPoller
from taskboard.automation.runner import TaskRunner
from taskboard.notifications.factory import TASK_COMMENT_SENDER_NAME, get_notification_service
from taskboard.notifications.service import TaskCommentNotificationSender
from taskboard.notion.client import NotionClient
from taskboard.notion.config import get_notion_config, get_page_database_id
from taskboard.notion.service import NotionService
from taskboard.plugins.notion_pages import NotionPagePlugin
from taskboard.plugins.taskboard import TaskboardPlugin
from taskboard.utils.config import EnvVarMissingError, get_env
from taskboard.utils.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def create_app(settings: Optional[WorkerSettings] = None) -> FastAPI:
    """
    FastAPI アプリケーションファクトリ。

    - ワーカー状態エンドポイント (/worker/status)
    - ヘルスチェックエンドポイント (/health)
    """
    app = FastAPI(title="Taskboard Worker", version=__version__)
    app.state.worker_settings = settings

    app.include_router(worker_router)

    @app.get("/health", tags=["health"])
    def health_check() -> dict:
        """
        簡易ヘルスチェックエンドポイント。
        """
        return {"status": "ok"}

    return app


def build_registry(
    notion: NotionService,
    settings: WorkerSettings,
    *,
    text_generator: Optional[TextCompletionClient] = None,
    commands_file: Optional[str] = None,
) -> CommandRegistry:
    """
    プラグインと（指定があれば）JSON のシーケンスコマンドを登録したレジストリを返す。
    """
    registry = CommandRegistry()
    registry.register_plugin(NotionPagePlugin(notion, get_page_database_id()))
    registry.register_plugin(
        TaskboardPlugin(
            notion,
            registry,
            text_generator or TextCompletionClient(),
            settings,
            notification_service=get_notification_service(),
        )
    )
    if commands_file:
        registry.register_commands(load_command_definitions(commands_file))
    return registry


async def run_worker(settings: WorkerSettings, *, port: Optional[int] = None) -> None:
    client = NotionClient()
    notion = NotionService(client)

    registry = build_registry(
        notion,
        settings,
        commands_file=get_env("TASKBOARD_COMMANDS_FILE", required=False),
    )
    get_notification_service().register(
        TASK_COMMENT_SENDER_NAME,
        TaskCommentNotificationSender(notion),
    )

    poller = TaskPoller(notion, TaskRunner(notion, registry), settings)
    logger.info("Registered %d commands", len(registry.get_all_command_formats()))

    try:
        if port is None:
            await poller.run_forever()
        else:
            import uvicorn

            server = uvicorn.Server(
                uvicorn.Config(create_app(settings), host="127.0.0.1", port=port, log_level="warning")
            )
            await asyncio.gather(poller.run_forever(), server.serve())
    finally:
        await client.aclose()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskboard-worker",
        description="Run agent commands queued on a Notion task board",
    )
    parser.add_argument("--version", action="version", version=__version__)
    parser.add_argument("-t", "--tasks-db", help="Notion database ID of the task board")
    parser.add_argument("-c", "--commands-db", help="Notion database ID of the command catalog")
    parser.add_argument("-n", "--name", help="worker name; tasks are picked by the Assign property")
    parser.add_argument("-d", "--debug", action="store_true", help="enable debug console logs")
    parser.add_argument("-l", "--log", action="store_true", help="enable debug logging to file")
    parser.add_argument("--port", type=int, help="serve the status API on this port")
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    load_dotenv()

    parser = build_parser()
    args = parser.parse_args(argv)

    setup_logging(
        console_debug=args.debug,
        log_to_file=args.log,
        log_dir=get_env("TASKBOARD_LOG_DIR", default=".local/taskboard", required=False),
    )

    settings = get_worker_settings().with_overrides(
        name=args.name,
        tasks_db=args.tasks_db,
        commands_db=args.commands_db,
    )
    if not settings.tasks_db:
        parser.error("task board database id is required (--tasks-db or TASKBOARD_TASKS_DB)")

    try:
        get_notion_config()
    except EnvVarMissingError as exc:
        parser.error(str(exc))

    try:
        asyncio.run(run_worker(settings, port=args.port))
    except KeyboardInterrupt:
        logger.info("Worker stopped")


# uvicorn 実行時のエントリーポイント（ステータス API のみ）
app = create_app()


if __name__ == "__main__":
    main()
