"""
Celery application for the closed-hours calendar job.

Worker plus beat is an alternative to the API's in-process scheduler thread;
run one or the other (SCHEDULER_ENABLED=false on the API when beat runs). Both
are safe together because every scheduler tick is idempotent.
"""

import logging
import os
from typing import Any, Type, cast

from celery import Celery, Task
from celery.signals import setup_logging

from seatbook.core.config import settings
from seatbook.tasks.beat_schedule import get_beat_schedule

logger = logging.getLogger(__name__)


def create_celery_app() -> Celery:
    broker_url = settings.get_broker_url()
    app = Celery(
        "seatbook",
        broker=broker_url,
        backend=os.getenv("CELERY_RESULT_BACKEND") or broker_url,
        include=["seatbook.tasks.blackout_tasks"],
    )
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        # Crontab hours are wall-clock hours of the seat calendar
        timezone=settings.timezone,
        enable_utc=True,
        worker_prefetch_multiplier=1,
        task_soft_time_limit=120,
        task_time_limit=300,
        task_acks_late=True,
        worker_hijack_root_logger=False,
        beat_schedule=get_beat_schedule(),
    )
    return app


# Keep the application's log format instead of Celery's
@setup_logging.connect  # type: ignore[misc]
def config_loggers(*args: Any, **kwargs: Any) -> None:
    logging.basicConfig(
        level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )


class LoggedTask(Task):  # type: ignore[misc]
    """Logs every task outcome. No automatic retries: the next daily tick covers a miss."""

    def on_failure(self, exc: Exception, task_id: str, args: Any, kwargs: Any, einfo: Any) -> None:
        logger.error(
            f"Task {self.name}[{task_id}] failed: {exc}",
            exc_info=True,
            extra={"task_id": task_id, "task_name": self.name},
        )
        super().on_failure(exc, task_id, args, kwargs, einfo)

    def on_success(self, retval: Any, task_id: str, args: Any, kwargs: Any) -> None:
        logger.info(
            f"Task {self.name}[{task_id}] returned {retval!r}",
            extra={"task_id": task_id, "task_name": self.name},
        )
        super().on_success(retval, task_id, args, kwargs)


celery_app = create_celery_app()
celery_app.Task = cast(Type[Task], LoggedTask)
