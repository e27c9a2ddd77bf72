# sales-enablement/dependencies.py
from typing import Optional

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from database import SessionLocal
import progress_store
from session import EngineSession, SessionContext

# --- Database Dependency ---
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

# --- Session Dependency ---
# The session arrives already validated upstream; nothing here parses the token.
def get_current_session(
    x_customer_id: Optional[str] = Header(None),
    x_record_id: Optional[str] = Header(None),
    x_access_token: Optional[str] = Header(None),
) -> EngineSession:
    if not x_customer_id or not x_access_token:
        raise HTTPException(status_code=401, detail="No active session.")
    return EngineSession.from_token(x_customer_id, x_record_id or "", x_access_token)

def get_context(
    session: EngineSession = Depends(get_current_session),
    db: Session = Depends(get_db),
) -> SessionContext:
    ledger = progress_store.load_ledger(db, session.customer_id)
    progress_store.touch_session(db, session.customer_id, session.session_key)
    db.commit()
    return SessionContext(session, ledger=ledger)
