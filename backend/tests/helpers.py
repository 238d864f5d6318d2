# backend/tests/helpers.py

from pathlib import Path

from sqlalchemy import func, select

from notify_relay.backends import BackendClient, BackendSettings
from notify_relay.backends.tables import api_logs, notification_check


def count_rows(client: BackendClient, table) -> int:
    with client.engine.connect() as conn:
        return conn.execute(select(func.count()).select_from(table)).scalar_one()


def count_notification_checks(client: BackendClient) -> int:
    return count_rows(client, notification_check)


def count_api_logs(client: BackendClient) -> int:
    return count_rows(client, api_logs)


def fetch_api_logs(client: BackendClient):
    with client.engine.connect() as conn:
        return conn.execute(select(api_logs).order_by(api_logs.c.id)).mappings().all()


def fetch_notification_checks(client: BackendClient):
    with client.engine.connect() as conn:
        return (
            conn.execute(select(notification_check).order_by(notification_check.c.id))
            .mappings()
            .all()
        )


def make_sqlite_backend(system_id: str, db_path: Path, *, create_schema: bool = True) -> BackendClient:
    settings = BackendSettings(system_id=system_id, url=f"sqlite:///{db_path}")
    client = BackendClient(settings)
    if create_schema:
        client.create_schema()
    return client
