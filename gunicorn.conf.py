"""
Gunicorn configuration for the Daylog API.

    gunicorn -c gunicorn.conf.py daylog.main:app

Env vars that override defaults:
  PORT     — TCP port to bind
  WORKERS  — number of worker processes (default: 2)
"""
import os

bind = f"0.0.0.0:{os.environ.get('PORT', '8000')}"

workers = int(os.environ.get("WORKERS", "2"))

# Uvicorn's ASGI loop inside each Gunicorn worker.
worker_class = "uvicorn.workers.UvicornWorker"

keepalive = 5
timeout = 120
graceful_timeout = 30

# stdout only; application records go through daylog.core.logging.
loglevel = os.environ.get("LOG_LEVEL", "info").lower()
accesslog = "-"
errorlog = "-"
access_log_format = '%(h)s "%(r)s" %(s)s %(b)sB %(D)sµs'
