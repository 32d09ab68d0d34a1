"""
Users Repository.

Responsibilities:
- CRUD operations for the users table.
- Password hashing and credential checks.
- Job applications (users <-> jobs).

Non-Responsibilities:
- No token issuance.
- No admin / same-user authorization checks.

Invariant:
Password hashes never leave this module.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import InvalidArgumentError, NotFoundError, UnauthorizedError
from ..security import hash_password, verify_password
from ..sql import build_set_clause, next_placeholder

USER_COLUMNS = (
    'username, first_name AS "firstName", last_name AS "lastName", '
    'email, is_admin AS "isAdmin"'
)
USER_COLUMN_MAP = {
    "firstName": "first_name",
    "lastName": "last_name",
    "isAdmin": "is_admin",
}


def _to_record(row: Dict[str, Any]) -> Dict[str, Any]:
    # SQLite hands booleans back as 0/1
    row["isAdmin"] = bool(row["isAdmin"])
    return row


class UserStore:
    def __init__(self, db: Database, work_factor: Optional[int] = None):
        self.db = db
        self.work_factor = work_factor

    def authenticate(self, username: str, password: str) -> Dict[str, Any]:
        """
        Check a username/password pair.

        Raises:
            UnauthorizedError: If the user is missing or the password is wrong
        """
        rows = self.db.query(
            f"SELECT {USER_COLUMNS}, password FROM users WHERE username = $1",
            [username],
        )
        if rows:
            user = rows[0]
            hashed = user.pop("password")
            if verify_password(password, hashed):
                return _to_record(user)

        raise UnauthorizedError("Invalid username/password")

    def register(
        self,
        username: str,
        password: str,
        first_name: str,
        last_name: str,
        email: str,
        is_admin: bool = False,
    ) -> Dict[str, Any]:
        """
        Register a user.

        Raises:
            InvalidArgumentError: If the username is already taken
        """
        duplicate = self.db.query("SELECT username FROM users WHERE username = $1", [username])
        if duplicate:
            raise InvalidArgumentError(f"Duplicate username: {username}")

        rows = self.db.query(
            f"""INSERT INTO users
                (username, password, first_name, last_name, email, is_admin)
                VALUES ($1, $2, $3, $4, $5, $6)
                RETURNING {USER_COLUMNS}""",
            [
                username,
                hash_password(password, self.work_factor),
                first_name,
                last_name,
                email,
                is_admin,
            ],
        )
        return _to_record(rows[0])

    def _applied_job_ids(self, username: str) -> List[int]:
        rows = self.db.query(
            "SELECT job_id FROM applications WHERE username = $1 ORDER BY job_id",
            [username],
        )
        return [r["job_id"] for r in rows]

    def find_all(self) -> List[Dict[str, Any]]:
        """Returns every user, ordered by username, with applied job ids."""
        users = [
            _to_record(r)
            for r in self.db.query(f"SELECT {USER_COLUMNS} FROM users ORDER BY username")
        ]
        applications = self.db.query(
            "SELECT username, job_id FROM applications ORDER BY job_id"
        )
        jobs_by_user: Dict[str, List[int]] = {}
        for application in applications:
            jobs_by_user.setdefault(application["username"], []).append(application["job_id"])

        for user in users:
            user["jobs"] = jobs_by_user.get(user["username"], [])
        return users

    def get(self, username: str) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If no user has this username
        """
        rows = self.db.query(f"SELECT {USER_COLUMNS} FROM users WHERE username = $1", [username])
        if not rows:
            raise NotFoundError(f"No user: {username}")

        user = _to_record(rows[0])
        user["jobs"] = self._applied_job_ids(username)
        return user

    def update(self, username: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Partial update of firstName, lastName, password, email and isAdmin.

        A new password is hashed before it is stored. The username is ignored
        if supplied.

        Raises:
            InvalidArgumentError: If nothing updatable is left in data, or the
                password is not a string
            NotFoundError: If no user has this username
        """
        payload = []
        for key, value in data.items():
            if key == "username":
                continue
            if key == "password":
                if not isinstance(value, str):
                    raise InvalidArgumentError("Password must be a string")
                value = hash_password(value, self.work_factor)
            payload.append((key, value))

        set_cols, values = build_set_clause(payload, USER_COLUMN_MAP)
        username_idx = next_placeholder(values)

        rows = self.db.query(
            f"""UPDATE users
                SET {set_cols}
                WHERE username = {username_idx}
                RETURNING {USER_COLUMNS}""",
            [*values, username],
        )
        if not rows:
            raise NotFoundError(f"No user: {username}")
        return _to_record(rows[0])

    def remove(self, username: str) -> None:
        rows = self.db.query(
            "DELETE FROM users WHERE username = $1 RETURNING username", [username]
        )
        if not rows:
            raise NotFoundError(f"No user: {username}")

    def apply_to_job(self, username: str, job_id: int) -> int:
        """
        Record that a user applied to a job.

        Returns:
            The job id

        Raises:
            NotFoundError: If the job or the user does not exist
            InvalidArgumentError: If the user already applied
        """
        if not self.db.query("SELECT id FROM jobs WHERE id = $1", [job_id]):
            raise NotFoundError(f"No job: {job_id}")
        if not self.db.query("SELECT username FROM users WHERE username = $1", [username]):
            raise NotFoundError(f"No user: {username}")

        existing = self.db.query(
            "SELECT job_id FROM applications WHERE username = $1 AND job_id = $2",
            [username, job_id],
        )
        if existing:
            raise InvalidArgumentError(f"Already applied: {username} -> job {job_id}")

        self.db.query(
            "INSERT INTO applications (username, job_id) VALUES ($1, $2)",
            [username, job_id],
        )
        return job_id
