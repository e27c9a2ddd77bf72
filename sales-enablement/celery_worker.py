# sales-enablement/celery_worker.py
import re
import logging
from datetime import timedelta
from celery import Celery
from database import SessionLocal
import config
import progress_store

log = logging.getLogger(__name__)

def parse_azure_redis_url(azure_url: str) -> str:
    if not azure_url or not azure_url.startswith('redis-'): return azure_url
    try:
        host, params = azure_url.split(',', 1)
        password_match = re.search(r'password=([^,]+)', params)
        password = password_match.group(1) if password_match else ''
        return f"rediss://:{password}@{host}?ssl_cert_reqs=CERT_NONE"
    except (ValueError, AttributeError):
        log.warning("Could not parse Azure Redis URL, falling back to original value.")
        return azure_url

parsed_redis_url = parse_azure_redis_url(config.REDIS_URL)
celery_app = Celery("sales_enablement", broker=parsed_redis_url, backend=parsed_redis_url)

celery_app.conf.beat_schedule = {
    "refresh-sessions": {
        "task": "celery_worker.refresh_sessions",
        "schedule": config.TIMER_CONFIG["session_refresh_seconds"],
    },
    "snapshot-profiles": {
        "task": "celery_worker.snapshot_profiles",
        "schedule": config.TIMER_CONFIG["autosave_seconds"],
    },
}

@celery_app.task(name="celery_worker.autosave_progress")
def autosave_progress(customer_id: str, tool_key: str, state: dict):
    db = SessionLocal()
    try:
        progress_store.save_user_progress(db, customer_id, tool_key, state)
        db.commit()
        return {"status": f"Saved {tool_key} progress for {customer_id}."}
    except Exception as e:
        db.rollback()
        log.error("An error occurred in autosave_progress for %s/%s: %s", customer_id, tool_key, e)
        return {"status": "Error during autosave."}
    finally:
        db.close()

@celery_app.task(name="celery_worker.refresh_sessions")
def refresh_sessions():
    """Touches session metadata only; never scores or awards."""
    lifetime = timedelta(hours=config.TIMER_CONFIG["session_lifetime_hours"])
    db = SessionLocal()
    try:
        counts = progress_store.refresh_sessions(db, lifetime)
        db.commit()
        log.info("Session refresh: %(refreshed)d refreshed, %(expired)d expired.", counts)
        return {"status": "Session refresh complete.", **counts}
    except Exception as e:
        db.rollback()
        log.error("An error occurred in refresh_sessions: %s", e)
        return {"status": "Error during session refresh."}
    finally:
        db.close()

@celery_app.task(name="celery_worker.snapshot_profiles")
def snapshot_profiles():
    db = SessionLocal()
    saved = 0
    try:
        for customer_id in progress_store.customers_with_awards(db):
            ledger = progress_store.load_ledger(db, customer_id)
            progress_store.save_snapshot(db, ledger.profile, events_applied=len(ledger.events))
            saved += 1
        db.commit()
        return {"status": f"Snapshot complete. Saved {saved} profiles."}
    except Exception as e:
        db.rollback()
        log.error("An error occurred in snapshot_profiles: %s", e)
        return {"status": "Error during profile snapshot."}
    finally:
        db.close()
