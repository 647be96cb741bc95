import os

import pytest

DEFAULT_TEST_DB_URL = "sqlite:///./test_moderation.db"
TEST_DB_URL = os.getenv("TEST_DB_URL", DEFAULT_TEST_DB_URL)
os.environ["DATABASE_URL"] = TEST_DB_URL

from sqlmodel import Session

from app.core.config import settings
from app.db.init_db import init_db
from app.db.session import engine
from app.models.comment import Comment
from app.models.conversation import Conversation
from app.models.enums import ReportReason, ReportStatus, TargetKind, UserRole
from app.models.message import Message
from app.models.post import Post
from app.models.report import Report
from app.models.user import User
from app.services import notification_service

settings.DATABASE_URL = TEST_DB_URL


class RecordingDelivery:
    def __init__(self, fail: bool = False) -> None:
        self.fail = fail
        self.delivered: list[tuple[str, str]] = []

    def deliver(self, notification) -> None:
        if self.fail:
            raise RuntimeError("transport down")
        self.delivered.append((notification.user_id, notification.type.value))


@pytest.fixture(autouse=True, scope="session")
def _configure_test_database():
    init_db(drop_all=True)
    yield


@pytest.fixture
def session():
    init_db(drop_all=True)
    with Session(engine) as db:
        yield db


@pytest.fixture
def delivery():
    backend = RecordingDelivery()
    previous = notification_service.set_delivery_backend(backend)
    try:
        yield backend
    finally:
        notification_service.set_delivery_backend(previous)


@pytest.fixture
def make_user(session):
    counter = {"n": 0}

    def _make(role: UserRole = UserRole.USER, **fields) -> User:
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"user{n}@example.com",
            hashed_password="x",
            username=f"user{n}",
            name=f"User {n}",
            role=role,
            **fields,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_post(session):
    def _make(author_id: str, content: str = "hello world") -> Post:
        post = Post(author_id=author_id, content=content)
        session.add(post)
        session.commit()
        session.refresh(post)
        return post

    return _make


@pytest.fixture
def make_comment(session):
    def _make(author_id: str, post_id: str, content: str = "nice post") -> Comment:
        comment = Comment(author_id=author_id, post_id=post_id, content=content)
        session.add(comment)
        session.commit()
        session.refresh(comment)
        return comment

    return _make


@pytest.fixture
def make_conversation(session):
    def _make(title: str = "study group") -> Conversation:
        conversation = Conversation(title=title, type="group")
        session.add(conversation)
        session.commit()
        session.refresh(conversation)
        return conversation

    return _make


@pytest.fixture
def make_message(session):
    def _make(conversation_id: str, sender_id: str, content: str = "hi") -> Message:
        message = Message(conversation_id=conversation_id, sender_id=sender_id, content=content)
        session.add(message)
        session.commit()
        session.refresh(message)
        return message

    return _make


@pytest.fixture
def add_history(session):
    """Insert closed reports for a reporter to shape their track record."""

    def _add(reporter_id: str, resolved: int = 0, dismissed: int = 0, pending: int = 0) -> None:
        statuses = (
            [ReportStatus.RESOLVED] * resolved
            + [ReportStatus.DISMISSED] * dismissed
            + [ReportStatus.PENDING] * pending
        )
        for index, status in enumerate(statuses):
            session.add(
                Report(
                    type=TargetKind.POST,
                    target_id=f"history-{reporter_id}-{index}",
                    reason=ReportReason.OTHER,
                    status=status,
                    reporter_id=reporter_id,
                    active_key=f"{reporter_id}:post:history-{index}" if status == ReportStatus.PENDING else None,
                )
            )
        session.commit()

    return _add
