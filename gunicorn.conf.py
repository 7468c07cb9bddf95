"""
Gunicorn configuration for the DishDisplay rewards API.

Env vars that override defaults:
  PORT     - TCP port to bind
  WORKERS  - number of worker processes (default: 2)

The leaderboard cache is per worker process; with several workers a stale
leaderboard can be served for up to LEADERBOARD_CACHE_TTL_SECONDS.
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))

# Uvicorn's ASGI event loop inside Gunicorn's process manager.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5

timeout = 60

# stdout only; the app's own loggers use the same stream (dishdisplay/core/logging.py)
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'

graceful_timeout = 30
