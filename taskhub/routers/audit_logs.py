from typing import List

from fastapi import APIRouter, Depends

from ..core.auth import CurrentUser, get_current_user
from ..core.policy import require_admin
from ..schemas.activity import AuditLogResponse
from ..services import get_audit_sink
from ..services.sinks import AuditSink

router = APIRouter()


@router.get("", response_model=List[AuditLogResponse])
async def get_audit_logs(
    current_user: CurrentUser = Depends(get_current_user),
    audit: AuditSink = Depends(get_audit_sink),
):
    """Fetch all audit logs, newest first (admin only)"""
    require_admin(current_user)
    return [AuditLogResponse.from_entry(entry, title) for entry, title in audit.list_all()]
