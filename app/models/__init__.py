from app.models.base import IDModel, TimestampModel
from app.models.user import User
from app.models.refresh_token import RefreshToken
from app.models.post import Post
from app.models.comment import Comment
from app.models.conversation import Conversation
from app.models.message import Message
from app.models.report import Report
from app.models.moderation_action import ModerationAction
from app.models.notification import Notification

__all__ = [
    'IDModel',
    'TimestampModel',
    'User',
    'RefreshToken',
    'Post',
    'Comment',
    'Conversation',
    'Message',
    'Report',
    'ModerationAction',
    'Notification',
]
