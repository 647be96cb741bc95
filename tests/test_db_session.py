from sqlalchemy import text

from app.db.session import _connect_args, get_session


def test_session_dependency_yields_working_session():
    gen = get_session()
    session = next(gen)
    assert session.connection().execute(text("SELECT 1")).scalar() == 1
    gen.close()


def test_sqlite_connections_allow_cross_thread_use():
    assert _connect_args("sqlite:///./moderation.db") == {"check_same_thread": False}
    assert _connect_args("mysql+pymysql://user:pw@db:3306/moderation?charset=utf8mb4") == {}
