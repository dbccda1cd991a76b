import os

from celery import Celery
from celery.signals import setup_logging

# Deployed workers default to production settings; pytest passes
# config.settings.test via --ds so setdefault leaves it alone.
os.environ.setdefault("DJANGO_SETTINGS_MODULE", "config.settings.production")

app = Celery("hr_orgchart")

# namespace='CELERY' means all celery-related configuration keys
# should have a `CELERY_` prefix.
app.config_from_object("django.conf:settings", namespace="CELERY")


@setup_logging.connect
def config_loggers(*args, **kwargs):
    from logging.config import dictConfig  # noqa: PLC0415

    from django.conf import settings  # noqa: PLC0415

    dictConfig(settings.LOGGING)


# Picks up hr_orgchart.orgchart.tasks (roster sync jobs).
app.autodiscover_tasks()
