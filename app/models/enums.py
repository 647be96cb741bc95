from enum import Enum
import sqlalchemy as sa
from sqlalchemy import Column


class UserRole(str, Enum):
    USER = 'user'
    MODERATOR = 'moderator'
    ADMIN = 'admin'


class TargetKind(str, Enum):
    USER = 'user'
    POST = 'post'
    COMMENT = 'comment'
    MESSAGE = 'message'
    CONVERSATION = 'conversation'


class ReportReason(str, Enum):
    SPAM = 'spam'
    HARASSMENT = 'harassment'
    HATE_SPEECH = 'hate_speech'
    VIOLENCE = 'violence'
    SEXUAL_CONTENT = 'sexual_content'
    MISINFORMATION = 'misinformation'
    COPYRIGHT = 'copyright'
    PRIVACY = 'privacy'
    IMPERSONATION = 'impersonation'
    OTHER = 'other'


class ReportPriority(str, Enum):
    LOW = 'low'
    MEDIUM = 'medium'
    HIGH = 'high'


class ReportStatus(str, Enum):
    PENDING = 'pending'
    INVESTIGATING = 'investigating'
    RESOLVED = 'resolved'
    DISMISSED = 'dismissed'


class ModerationActionType(str, Enum):
    NONE = 'none'
    WARNING = 'warning'
    CONTENT_REMOVAL = 'content_removal'
    TEMPORARY_BAN = 'temporary_ban'
    PERMANENT_BAN = 'permanent_ban'


class NotificationType(str, Enum):
    MODERATION_REPORT = 'moderation_report'
    REPORT_UPDATE = 'report_update'


class TrustAdjustment(str, Enum):
    UPGRADE = 'upgrade'
    NEUTRAL = 'neutral'
    DOWNGRADE = 'downgrade'


def enum_column(enum_cls: type[Enum], name: str, nullable: bool = False) -> Column:
    return Column(
        sa.Enum(
            enum_cls,
            values_callable=lambda enum: [item.value for item in enum],
            name=name,
        ),
        nullable=nullable,
    )
