from fastapi import APIRouter, Depends, HTTPException
from messagepilot.models import MessageHistory
from sqlmodel import Session, select
from messagepilot.core.database import get_db
import os

router = APIRouter(prefix="/admin", tags=["admin"])

# Simple API key auth
def verify_api_key(api_key: str):
    if api_key != os.getenv("ADMIN_API_KEY", "admin_secret_key"):
        raise HTTPException(status_code=403, detail="Invalid API key")
    return True

@router.get("/history", dependencies=[Depends(verify_api_key)])
def get_message_history(
    limit: int = 100, status: str = None, session: Session = Depends(get_db)
):
    """Get message history, newest first"""
    query = select(MessageHistory)
    if status:
        query = query.where(MessageHistory.status == status)
    query = query.order_by(MessageHistory.created_at.desc()).limit(min(max(limit, 1), 500))
    return session.exec(query).all()
