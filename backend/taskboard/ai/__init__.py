# backend/taskboard/ai/__init__.py

"""
テキスト生成（LLM）連携。

タスク作成コマンドがタイトル・アイコン・説明文を生成するのに使う。
"""
