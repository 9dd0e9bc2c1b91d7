"""
System log utilities.

Business events are persisted next to the change they describe.
"""

from typing import Any, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from src.models.system_log import LogType, SystemLog


def log_event(
    db: AsyncSession,
    type: LogType,
    message: str,
    source: str = "admin",
    deal_id: Optional[int] = None,
    data: Optional[dict[str, Any]] = None,
) -> SystemLog:
    """
    Log a business event.

    Args:
        db: Database session
        type: Kind of event
        message: Human-readable summary
        source: Origin of the event (e.g., "admin", "api", "scheduler")
        deal_id: Deal the event concerns, if any
        data: Additional JSON-serializable context

    Returns:
        Created SystemLog entry
    """
    entry = SystemLog(
        type=type,
        source=source,
        message=message,
        deal_id=deal_id,
        data=data,
    )
    db.add(entry)
    # Note: commit should happen in the calling context
    return entry
