# backend/notify_relay/__init__.py
"""
Notify relay (BFF) application package.

This package contains:
- main: FastAPI application entrypoint
- notify: /work/notifyme validation and fan-out
- backends: system1 / system2 database clients
"""
