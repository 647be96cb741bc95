from typing import Annotated, Literal, Optional, Union
from datetime import datetime
from pydantic import BaseModel, Field, TypeAdapter
from app.models.enums import (
    ModerationActionType,
    NotificationType,
    ReportReason,
    ReportStatus,
    TargetKind,
)


class ModerationReportPayload(BaseModel):
    kind: Literal['moderation_report'] = 'moderation_report'
    report_id: str
    type: TargetKind
    reason: ReportReason


class ReportUpdatePayload(BaseModel):
    kind: Literal['report_update'] = 'report_update'
    report_id: str
    status: ReportStatus
    action: Optional[ModerationActionType] = None


NotificationPayload = Annotated[
    Union[ModerationReportPayload, ReportUpdatePayload],
    Field(discriminator='kind'),
]

notification_payload_adapter: TypeAdapter[NotificationPayload] = TypeAdapter(NotificationPayload)


class NotificationUpdate(BaseModel):
    read: bool


class NotificationOut(BaseModel):
    id: str
    type: NotificationType
    title: str
    message: str
    data: NotificationPayload
    read: bool
    created_at: datetime
