# Celery instance is defined in ta_project/celery.py
# celery_app becomes the singleton task queue app for the whole project
from .celery import celery_app

__all__ = ("celery_app",)

""" Workers start with "celery -A ta_project worker -l info":
    -A ta_project imports ta_project/__init__.py, which exposes celery_app. """
