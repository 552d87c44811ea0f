# backend/taskboard/agent/__init__.py

"""
エージェント側（コマンド実行系）のモジュール群。

- schemas: CommandResult / CommandDefinition などの共通スキーマ
- registry: プラグインのコマンドを登録・照合・実行するレジストリ
- plugin: プラグインの最小インターフェース
"""
