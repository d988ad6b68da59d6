"""Alembic migration tests.

File named test_zzz_alembic.py to sort LAST in pytest collection order.
"""

from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import inspect, text

from scoreboard.db import make_engine

ROOT_DIR = Path(__file__).resolve().parents[1]


def _alembic_config(url: str) -> Config:
    config = Config(str(ROOT_DIR / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT_DIR / "alembic"))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_upgrade_head_builds_schema_and_view(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    command.upgrade(_alembic_config(url), "head")

    engine = make_engine(url)
    try:
        inspector = inspect(engine)
        assert {"users", "user_flags", "audit_logs"} <= set(inspector.get_table_names())
        assert "leaderboard" in inspector.get_view_names()

        with engine.begin() as conn:
            conn.execute(text("INSERT INTO users (username) VALUES ('alice'), ('bob'), ('charlie')"))
            conn.execute(text("UPDATE users SET total_score = 100 WHERE username IN ('alice', 'bob')"))
            conn.execute(text("UPDATE users SET total_score = 50 WHERE username = 'charlie'"))
            conn.execute(
                text("INSERT INTO user_flags (username, flag_key, points) VALUES ('alice', 'f1', 100)")
            )
            rows = conn.execute(
                text("SELECT username, flags_count, rank FROM leaderboard ORDER BY rank, username")
            ).all()
        assert [tuple(r) for r in rows] == [("alice", 1, 1), ("bob", 0, 1), ("charlie", 0, 3)]
    finally:
        engine.dispose()


def test_downgrade_to_base(tmp_path) -> None:
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _alembic_config(url)
    command.upgrade(config, "head")
    command.downgrade(config, "base")

    engine = make_engine(url)
    try:
        assert set(inspect(engine).get_table_names()) == {"alembic_version"}
    finally:
        engine.dispose()
