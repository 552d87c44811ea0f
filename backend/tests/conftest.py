# backend/tests/conftest.py
"""
Pytest configuration for the taskboard worker tests.

- Ensures that backend/ is added to sys.path so that `import taskboard.*` works.
- Sets safe dummy values for required environment variables.
- Resets cached settings and process-wide singletons between tests.
"""

import os
import sys
from pathlib import Path

import pytest


def _ensure_project_root_in_sys_path() -> None:
    # This file is located at: backend/tests/conftest.py
    # parents[1] -> backend/
    project_root = Path(__file__).resolve().parents[1]
    project_root_str = str(project_root)

    if project_root_str not in sys.path:
        sys.path.insert(0, project_root_str)


def _ensure_test_env_vars() -> None:
    """
    Set dummy environment variables required for tests.

    These values are only for local testing and do NOT contain real secrets.
    """
    os.environ.setdefault("NOTION_API_KEY", "dummy-notion-api-key-for-tests")
    os.environ.setdefault("TASKBOARD_TASKS_DB", "dummy-tasks-db-for-tests")


_ensure_project_root_in_sys_path()
_ensure_test_env_vars()


@pytest.fixture(autouse=True)
def _reset_singletons():
    from taskboard.ai.config import get_text_completion_settings
    from taskboard.automation.config import get_worker_settings
    from taskboard.automation.state import reset_state
    from taskboard.notifications.factory import reset_notification_service
    from taskboard.notion.config import get_notion_config
    from taskboard.notion.rate_limiter import reset_rate_limiter

    def reset() -> None:
        get_notion_config.cache_clear()
        get_worker_settings.cache_clear()
        get_text_completion_settings.cache_clear()
        reset_state()
        reset_notification_service()
        reset_rate_limiter()

    reset()
    yield
    reset()
