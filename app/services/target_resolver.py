"""Lookup of report/action targets across the five content kinds.

Every consumer goes through :func:`get_resolver` instead of branching on the
target kind itself, so adding a kind means registering one more resolver.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Optional
from sqlmodel import Session, SQLModel
from app.core.errors import NotFound
from app.models.comment import Comment
from app.models.conversation import Conversation
from app.models.enums import TargetKind
from app.models.message import Message
from app.models.post import Post
from app.models.user import User


def _snapshot_value(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if hasattr(value, 'value'):
        return value.value
    return value


@dataclass(frozen=True)
class TargetResolver:
    kind: TargetKind
    model: type[SQLModel]
    snapshot_fields: tuple[str, ...]
    author_field: Optional[str] = None

    def get(self, session: Session, target_id: str) -> Optional[SQLModel]:
        return session.get(self.model, target_id)

    def require(self, session: Session, target_id: str) -> SQLModel:
        record = self.get(session, target_id)
        if record is None:
            raise NotFound(f'{self.kind.value.capitalize()} {target_id} not found', code='target_not_found')
        return record

    def snapshot(self, record: SQLModel) -> dict[str, Any]:
        return {name: _snapshot_value(getattr(record, name)) for name in self.snapshot_fields}

    def resolve(self, session: Session, target_id: str) -> dict[str, Any]:
        return self.snapshot(self.require(session, target_id))

    def resolve_author(self, session: Session, target_id: str) -> str:
        record = self.require(session, target_id)
        if self.author_field is None:
            raise NotFound(f'{self.kind.value.capitalize()} {target_id} has no author', code='author_not_found')
        author_id = getattr(record, self.author_field)
        if not author_id:
            raise NotFound(f'Author of {self.kind.value} {target_id} not found', code='author_not_found')
        return author_id


_RESOLVERS: dict[TargetKind, TargetResolver] = {
    TargetKind.USER: TargetResolver(TargetKind.USER, User, ('id', 'username', 'name'), author_field='id'),
    TargetKind.POST: TargetResolver(TargetKind.POST, Post, ('id', 'content', 'author_id'), author_field='author_id'),
    TargetKind.COMMENT: TargetResolver(
        TargetKind.COMMENT, Comment, ('id', 'content', 'author_id'), author_field='author_id'
    ),
    TargetKind.MESSAGE: TargetResolver(
        TargetKind.MESSAGE, Message, ('id', 'content', 'sender_id'), author_field='sender_id'
    ),
    TargetKind.CONVERSATION: TargetResolver(TargetKind.CONVERSATION, Conversation, ('id', 'title', 'type')),
}


def get_resolver(kind: TargetKind) -> TargetResolver:
    return _RESOLVERS[TargetKind(kind)]


def resolve(session: Session, kind: TargetKind, target_id: str) -> dict[str, Any]:
    return get_resolver(kind).resolve(session, target_id)


def resolve_author(session: Session, kind: TargetKind, target_id: str) -> str:
    return get_resolver(kind).resolve_author(session, target_id)
