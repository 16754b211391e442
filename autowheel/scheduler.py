# autowheel/scheduler.py
"""Process-wide background scheduler shared by debounce timers and storage polling."""
import threading

from apscheduler.schedulers.background import BackgroundScheduler
from .utils import logger

scheduler = BackgroundScheduler(timezone="UTC")
_lock = threading.Lock()

def get_scheduler():
    with _lock:
        if not scheduler.running:
            scheduler.start()
            logger.info("Scheduler started")
    return scheduler

def shutdown_scheduler():
    with _lock:
        if scheduler.running:
            scheduler.shutdown(wait=False)
            logger.info("Scheduler stopped")
