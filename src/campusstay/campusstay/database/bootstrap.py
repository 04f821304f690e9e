"""Schema/seed helpers used by ``create_app`` (AUTO_INIT_DB / AUTO_SEED_DB) and scripts/."""

from __future__ import annotations

import re
from pathlib import Path
from typing import Iterable, List, Tuple

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

# (email, username, password) for the rows inserted by database/seed.sql
DEMO_LOGINS = (
    ("aarav@example.com", "aarav.sharma", "student123"),
    ("diya@example.com", "diya.patel", "student123"),
)


def _target(db_config: dict) -> DBConfig:
    return DBConfig.from_dict(
        {
            "host": db_config.get("host", "localhost"),
            "port": db_config.get("port", 3306),
            "user": db_config.get("user", "root"),
            "password": db_config.get("password", ""),
            "database": db_config.get("database", "campusstay_db"),
        }
    )


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # The files name campusstay_db; the configured database wins.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _strip_comments(sql: str) -> str:
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal splitter for schema/seed files (handles ';' inside quotes).
    buf: list[str] = []
    quote = ""
    escape = False

    for ch in sql:
        if escape:
            buf.append(ch)
            escape = False
            continue
        if ch == "\\":
            buf.append(ch)
            escape = True
            continue
        if ch in ("'", '"'):
            if not quote:
                quote = ch
            elif quote == ch:
                quote = ""
            buf.append(ch)
            continue
        if ch == ";" and not quote:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
            continue
        buf.append(ch)

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _run_sql_file(db_config: dict, path: str | Path) -> None:
    sql = _strip_comments(_strip_create_db_and_use(Path(path).read_text(encoding="utf-8")))
    conn = _connect(_target(db_config))
    try:
        cur = conn.cursor()
        for stmt in _iter_sql_statements(sql):
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(db_config: dict) -> None:
    target = _target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    _run_sql_file(db_config, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    _run_sql_file(db_config, seed_path)


def ensure_demo_students(db_config: dict) -> List[Tuple[str, str]]:
    """Give the seeded students a login (hashes cannot be written from SQL).

    Returns the ``(username, password)`` pairs that were set.
    """

    conn = _connect(_target(db_config))
    applied: List[Tuple[str, str]] = []
    try:
        cur = conn.cursor(dictionary=True)
        for email, username, password in DEMO_LOGINS:
            cur.execute("SELECT student_id FROM students WHERE email=%s", (email,))
            row = cur.fetchone()
            if not row:
                continue
            cur.execute(
                "UPDATE students SET username=%s, password_hash=%s WHERE student_id=%s",
                (username, generate_password_hash(password), int(row["student_id"])),
            )
            applied.append((username, password))
        conn.commit()
    finally:
        conn.close()
    return applied


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
