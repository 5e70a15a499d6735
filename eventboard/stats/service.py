"""Hit recording and view aggregation."""
import logging
from datetime import datetime
from typing import Optional

from sqlalchemy import distinct, func
from sqlalchemy.orm import Session

from eventboard.errors import ValidationError
from eventboard.services.stats_client import DATE_FORMAT
from eventboard.stats.models import EndpointHit

logger = logging.getLogger(__name__)


def parse_timestamp(value: str) -> datetime:
    try:
        return datetime.strptime(value, DATE_FORMAT)
    except ValueError:
        raise ValidationError(f"Invalid timestamp '{value}', expected yyyy-MM-dd HH:mm:ss")


def add_hit(db: Session, app: str, uri: str, ip: str, timestamp: datetime) -> EndpointHit:
    hit = EndpointHit(app=app, uri=uri, ip=ip, timestamp=timestamp)
    db.add(hit)
    db.commit()
    db.refresh(hit)
    logger.debug("Recorded hit %s %s from %s", app, uri, ip)
    return hit


def get_stats(
    db: Session,
    start: datetime,
    end: datetime,
    uris: Optional[list[str]] = None,
    unique: bool = False,
) -> list[dict]:
    """Hits per (app, uri) in ``[start, end]``, most viewed first.

    With ``unique`` each client ip counts once per uri.
    """
    if start > end:
        raise ValidationError("Start must not be after end")

    hits = func.count(distinct(EndpointHit.ip)) if unique else func.count(EndpointHit.id)
    query = (
        db.query(EndpointHit.app, EndpointHit.uri, hits.label("hits"))
        .filter(EndpointHit.timestamp >= start, EndpointHit.timestamp <= end)
    )
    if uris:
        query = query.filter(EndpointHit.uri.in_(uris))
    rows = query.group_by(EndpointHit.app, EndpointHit.uri).order_by(hits.desc()).all()
    return [{"app": app, "uri": uri, "hits": total} for app, uri, total in rows]
