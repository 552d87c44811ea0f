# backend/taskboard/api/worker_status.py

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from taskboard.automation.config import WorkerSettings, get_worker_settings
from taskboard.automation.schemas import WorkerStatus
from taskboard.automation.state import WorkerState, get_worker_state

router = APIRouter(prefix="/worker", tags=["worker"])


# テスト時に FastAPI dependency_overrides で差し替え可能にする
def get_state() -> WorkerState:
    return get_worker_state()


def get_settings(request: Request) -> WorkerSettings:
    # CLI 引数で上書きした設定は create_app() 時に app.state に入っている
    settings = getattr(request.app.state, "worker_settings", None)
    return settings or get_worker_settings()


@router.get(
    "/status",
    response_model=WorkerStatus,
    summary="Get current worker status",
)
def get_status(
    state: WorkerState = Depends(get_state),
    settings: WorkerSettings = Depends(get_settings),
) -> WorkerStatus:
    """
    ポーラーの状態（実行中フラグ・実行中タスク・完了/失敗件数）を返す。
    """
    return state.snapshot(settings.name)
