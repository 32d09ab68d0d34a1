"""
Database schema and the parameterized-query handle used by the stores.

Tables are declared with SQLAlchemy; statements are plain SQL with
positional ``$n`` placeholders, bound through SQLAlchemy so any supported
engine (SQLite for development and tests, PostgreSQL in production) works.
"""

import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    create_engine,
    event,
    text,
)
from sqlalchemy.engine import Engine, make_url
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import expression

from .logger import StructuredLogger, get_logger

Base = declarative_base()

# Group 1: quoted identifier or string literal, passed through untouched.
# Group 2: position of a $n placeholder.
PLACEHOLDER_RE = re.compile(r'("(?:[^"]|"")*"|\'(?:[^\']|\'\')*\')|\$(\d+)')


class Company(Base):
    __tablename__ = "companies"
    __table_args__ = (
        CheckConstraint("handle = lower(handle)", name="ck_companies_handle_lower"),
        CheckConstraint("num_employees >= 0", name="ck_companies_num_employees"),
    )

    handle = Column(String(25), primary_key=True)
    name = Column(Text, nullable=False, unique=True)
    num_employees = Column(Integer)
    description = Column(Text, nullable=False)
    logo_url = Column(Text)


class Job(Base):
    __tablename__ = "jobs"
    __table_args__ = (
        CheckConstraint("salary >= 0", name="ck_jobs_salary"),
        CheckConstraint("equity <= 1.0", name="ck_jobs_equity"),
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(Text, nullable=False)
    salary = Column(Integer)
    equity = Column(Numeric)
    company_handle = Column(
        String(25), ForeignKey("companies.handle", ondelete="CASCADE"), nullable=False
    )


class User(Base):
    __tablename__ = "users"
    __table_args__ = (
        CheckConstraint("email LIKE '_%@%'", name="ck_users_email"),
    )

    username = Column(String(25), primary_key=True)
    password = Column(Text, nullable=False)
    first_name = Column(Text, nullable=False)
    last_name = Column(Text, nullable=False)
    email = Column(Text, nullable=False)
    is_admin = Column(Boolean, nullable=False, server_default=expression.false())


class Application(Base):
    __tablename__ = "applications"

    username = Column(
        String(25), ForeignKey("users.username", ondelete="CASCADE"), primary_key=True
    )
    job_id = Column(Integer, ForeignKey("jobs.id", ondelete="CASCADE"), primary_key=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def get_engine(url: str) -> Engine:
    """
    Create an engine for the given database URL.

    SQLite file databases get their parent directory created and foreign key
    enforcement switched on (needed for cascading deletes).
    """
    parsed = make_url(url)
    if parsed.get_backend_name() == "sqlite":
        if parsed.database and parsed.database != ":memory:":
            Path(parsed.database).parent.mkdir(parents=True, exist_ok=True)
        engine = create_engine(url)
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
        return engine
    return create_engine(url)


def init_database(url: str) -> Engine:
    """
    Create all tables that do not exist yet.

    Args:
        url: SQLAlchemy database URL

    Returns:
        Engine bound to the database
    """
    engine = get_engine(url)
    Base.metadata.create_all(engine)
    return engine


def bind_positional(sql: str, params: Sequence[Any]) -> Tuple[str, Dict[str, Any]]:
    """
    Rewrite ``$n`` placeholders as named bind parameters.

    Text inside double-quoted identifiers and single-quoted literals is
    never rewritten, so a column named ``"p$2"`` keeps its name.

    Returns:
        (sql with ``:pN`` binds, {"pN": value})

    Raises:
        ValueError: If a placeholder has no matching value
    """
    count = len(params)

    def rename(match: "re.Match") -> str:
        if match.group(2) is None:
            return match.group(1)
        position = int(match.group(2))
        if position < 1 or position > count:
            raise ValueError(
                f"Placeholder ${position} has no value ({count} parameters given)"
            )
        return f":p{position}"

    return PLACEHOLDER_RE.sub(rename, sql), {
        f"p{idx}": value for idx, value in enumerate(params, start=1)
    }


def _statement_kind(sql: str) -> str:
    words = sql.split(None, 1)
    return words[0].upper() if words else ""


class Database:
    """Executes parameterized statements; one transaction per statement."""

    def __init__(self, engine: Engine, logger: Optional[StructuredLogger] = None):
        self.engine = engine
        self.logger = logger or get_logger()

    @classmethod
    def from_url(cls, url: str, logger: Optional[StructuredLogger] = None) -> "Database":
        return cls(get_engine(url), logger=logger)

    def query(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        """
        Run one statement and return its rows as dicts.

        Statements without a result set (and no RETURNING) give [].
        Database errors are logged and re-raised unchanged.
        """
        statement, binds = bind_positional(sql, params)
        kind = _statement_kind(statement)

        try:
            with self.engine.begin() as conn:
                result = conn.execute(text(statement), binds)
                rows = [dict(row._mapping) for row in result] if result.returns_rows else []
        except Exception as e:
            self.logger.record_query_failure(kind, type(e).__name__)
            self.logger.error(
                "Query failed",
                kind=kind,
                error_type=type(e).__name__,
                error=str(e),
            )
            raise

        self.logger.record_query(kind, len(rows))
        self.logger.debug("Query executed", kind=kind, params=len(params), rows=len(rows))
        return rows

    def dispose(self) -> None:
        self.engine.dispose()
