"""
OAuth state storage

State values are persisted so the callback can be validated on any worker.
Each state is bound to the session that started the flow and may be used once.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from .models import OAuthState
from .security_utils import generate_state_token

logger = logging.getLogger(__name__)

STATE_TTL = timedelta(minutes=10)


@dataclass
class ConsumedState:
    state: str
    redirect_path: Optional[str]


def create_oauth_state(db: Session, session_id: str, redirect_path: Optional[str] = None) -> str:
    """Create and persist a new state value for this session"""
    state = generate_state_token()
    db.add(
        OAuthState(
            state=state,
            session_id=session_id,
            redirect_path=redirect_path,
            expires_at=datetime.utcnow() + STATE_TTL,
        )
    )
    db.commit()
    logger.info("🔑 OAuth state created")
    return state


def consume_oauth_state(db: Session, state: Optional[str], session_id: Optional[str]) -> Optional[ConsumedState]:
    """
    Validate and delete a state value.

    Returns None when the state is unknown, expired or was issued to a
    different session. A matching row is deleted in every case.
    """
    if not state:
        return None

    row = db.query(OAuthState).filter(OAuthState.state == state).first()
    if not row:
        logger.warning("⚠️ OAuth state not found")
        return None

    redirect_path = row.redirect_path
    expired = row.expires_at < datetime.utcnow()
    session_matches = session_id is not None and row.session_id == session_id

    db.delete(row)
    db.commit()

    if expired:
        logger.warning("⚠️ OAuth state expired")
        return None
    if not session_matches:
        logger.warning("⚠️ OAuth state session mismatch")
        return None

    return ConsumedState(state=state, redirect_path=redirect_path)


def cleanup_expired_states(db: Session) -> int:
    """Delete expired states, returns how many were removed"""
    deleted = (
        db.query(OAuthState)
        .filter(OAuthState.expires_at < datetime.utcnow())
        .delete(synchronize_session=False)
    )
    db.commit()
    if deleted:
        logger.info(f"🧹 Removed {deleted} expired OAuth states")
    return deleted
