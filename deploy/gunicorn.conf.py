"""
Gunicorn settings for the Peer Recognition API

    gunicorn -c deploy/gunicorn.conf.py

The memory backend keeps its document inside one process, so WEB_CONCURRENCY
defaults to 1 for it. File, redis and sql backends can scale out.
"""
import os
import multiprocessing

_backend = os.environ.get("STORAGE_BACKEND", "memory").lower()
_default_workers = 1 if _backend == "memory" else multiprocessing.cpu_count() * 2 + 1

wsgi_app = "peer_recognition.main:app"
bind = os.environ.get("BIND", "0.0.0.0:8000")
workers = int(os.environ.get("WEB_CONCURRENCY", _default_workers))
worker_class = "uvicorn.workers.UvicornWorker"
timeout = int(os.environ.get("GUNICORN_TIMEOUT", 60))
graceful_timeout = 30
keepalive = 5

# stdout/stderr; the container runtime collects them
accesslog = "-"
errorlog = "-"
loglevel = os.environ.get("LOG_LEVEL", "info").lower()

proc_name = "peer-recognition"


def when_ready(server):
    server.log.info(f"Peer Recognition API ready: {workers} worker(s), storage={_backend}")
