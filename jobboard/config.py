import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

DEFAULT_DATABASE_URL = "sqlite:///data/jobboard.db"
DEFAULT_TEST_DATABASE_URL = "sqlite:///data/jobboard_test.db"


def load_env() -> None:
    """Load .env from the working directory if present.
    Values already set in the environment win.
    """
    env_path = Path.cwd() / ".env"
    if env_path.exists():
        load_dotenv(dotenv_path=env_path, override=False)


def is_test_env() -> bool:
    return os.environ.get("JOBBOARD_ENV", "").lower() == "test"


def get_database_uri() -> str:
    if is_test_env():
        return os.environ.get("TEST_DATABASE_URL", DEFAULT_TEST_DATABASE_URL)
    return os.environ.get("DATABASE_URL", DEFAULT_DATABASE_URL)


def get_bcrypt_work_factor() -> int:
    # Tests hash many passwords; keep them fast
    default = 4 if is_test_env() else 12
    return int(os.environ.get("BCRYPT_WORK_FACTOR", default))


def get_log_level() -> str:
    return os.environ.get("LOG_LEVEL", "INFO").upper()


def get_log_dir() -> Optional[Path]:
    log_dir = os.environ.get("LOG_DIR")
    return Path(log_dir) if log_dir else None
