import hashlib
import json
from typing import Any, Optional

from sqlalchemy.orm import Session

from magix.core.logging import get_logger
from magix.models.audit import AuditEntity, AuditLog

logger = get_logger(__name__)


def record_audit(
    db: Session,
    *,
    user_id: Optional[int],
    action: str,
    entity: AuditEntity,
    entity_id: Optional[int],
    summary: dict[str, Any],
    ip: Optional[str] = None,
    ua: Optional[str] = None,
) -> AuditLog:
    payload = json.dumps(summary, sort_keys=True, default=str, ensure_ascii=False)
    hash_value = hashlib.sha256(payload.encode()).hexdigest()
    log = AuditLog(
        user_id=user_id,
        action=action,
        entity=AuditEntity(entity).value,
        entity_id=entity_id,
        summary=payload[:500],
        ip=ip,
        ua=ua,
        hash=hash_value,
    )
    db.add(log)
    db.flush()
    logger.info(f"audit {action} {log.entity}#{entity_id} user={user_id}")
    return log
