from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, inspect

ROOT = Path(__file__).resolve().parents[1]


def _alembic_config(url):
    # No ini file: env.py then leaves the test process logging alone
    config = Config()
    config.set_main_option("script_location", str(ROOT / "lms_backend" / "alembic"))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_upgrade_head_creates_pipeline_tables(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"

    command.upgrade(_alembic_config(url), "head")

    inspector = inspect(create_engine(url))
    assert {"users", "courses", "videos", "video_view_logs", "certificates"} <= set(inspector.get_table_names())
    constraints = {c["name"] for c in inspector.get_unique_constraints("video_view_logs")}
    assert "uq_user_video_view_log" in constraints
    constraints = {c["name"] for c in inspector.get_unique_constraints("certificates")}
    assert "uq_user_course_certificate" in constraints


def test_downgrade_removes_tables(tmp_path):
    url = f"sqlite:///{tmp_path / 'migrated.db'}"
    config = _alembic_config(url)

    command.upgrade(config, "head")
    command.downgrade(config, "base")

    assert set(inspect(create_engine(url)).get_table_names()) <= {"alembic_version"}
