# backend/seatbook/tasks/__init__.py
"""
Celery tasks package.

Import `seatbook.tasks.celery_app` to get the configured application; task
modules are registered through `celery_app.conf.imports`.
"""
