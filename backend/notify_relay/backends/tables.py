# backend/notify_relay/backends/tables.py

"""
各バックエンド DB に書き込むテーブル定義。

system1 / system2 は同じスキーマを持つ前提なので、MetaData は 1 つだけ用意し
エンジンごとに使い回す。
"""

from sqlalchemy import Column, DateTime, Integer, MetaData, String, Table, Text

metadata = MetaData()

notification_check = Table(
    "notification_check",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("dm_id", Integer, nullable=False),
    Column("notify_check", Integer, nullable=False),
    Column("cr_date", DateTime, nullable=False),
    Column("update_date", DateTime, nullable=False),
)

# 監査用の API 呼び出しログ
api_logs = Table(
    "api_logs",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("endpoint", String(255), nullable=False),
    Column("method", String(16), nullable=False),
    Column("request_payload", Text, nullable=False),
    Column("response_payload", Text, nullable=False),
    Column("status_code", Integer, nullable=False),
    Column("created_at", DateTime, nullable=False),
)
