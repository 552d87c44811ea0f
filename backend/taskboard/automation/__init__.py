# backend/taskboard/automation/__init__.py

"""
タスクボードのポーリング・タスク実行モジュール群。

- config: ワーカー設定（担当者名 / データベース ID / ポーリング間隔）
- state: 実行中フラグ・実行中タスクなどの共有状態
- runner: 1 タスク分のチェックリストをコマンドとして順に実行
- poller: 一定間隔でキューを確認し、runner に渡す
"""
