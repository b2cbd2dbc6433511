"""
Youth Profile Export Module

Asynchronous exports of filtered youth profiles with their related
collections as JSON, CSV or XLSX. Jobs run in the background (FastAPI
background tasks or Celery) and record their state as files in the
exports directory.
"""
