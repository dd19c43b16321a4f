from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from magix.models.audit import AuditEntity


class AuditLogRead(BaseModel):
    id: int
    user_id: Optional[int]
    action: str
    entity: AuditEntity
    entity_id: Optional[int]
    summary: str
    ip: Optional[str]
    ua: Optional[str]
    created_at: datetime

    model_config = {
        "from_attributes": True,
    }


class AuditFiltro(BaseModel):
    """Filtros aceptados por GET /admin/auditoria."""

    user_id: Optional[int] = None
    action: Optional[str] = None
    entity: Optional[AuditEntity] = None
    start: Optional[datetime] = None
    end: Optional[datetime] = None
