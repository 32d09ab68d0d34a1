"""
Jobs Repository.

Responsibilities:
- CRUD operations for the jobs table.
- Title / minimum salary / equity filtering of listings.

Non-Responsibilities:
- No authorization decisions.
- No request validation beyond what the SQL helpers enforce.

Invariant:
Every statement is parameterized; values never reach the SQL text.
"""

from decimal import Decimal
from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import NotFoundError
from ..filters import FilterCriteria, FilterFields, apply_filters
from ..sql import build_set_clause, next_placeholder

JOB_COLUMNS = "id, title, salary, equity, company_handle"
JOB_FILTER_FIELDS = FilterFields(text="title", numeric="salary", flag="equity")

# Set at creation and never patched
IMMUTABLE_FIELDS = ("id", "company_handle")


def _to_record(row: Dict[str, Any]) -> Dict[str, Any]:
    """Equity comes back as str, float or Decimal depending on the driver."""
    equity = row.get("equity")
    if equity is not None and not isinstance(equity, Decimal):
        row["equity"] = Decimal(str(equity))
    return row


def _bindable(value: Any) -> Any:
    # Not every driver binds Decimal; numeric text is accepted everywhere
    return str(value) if isinstance(value, Decimal) else value


class JobStore:
    def __init__(self, db: Database):
        self.db = db

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a job.

        Args:
            data: {title, salary, equity, company_handle}

        Returns:
            {id, title, salary, equity, company_handle}
        """
        rows = self.db.query(
            f"""INSERT INTO jobs (title, salary, equity, company_handle)
                VALUES ($1, $2, $3, $4)
                RETURNING {JOB_COLUMNS}""",
            [
                data["title"],
                data.get("salary"),
                _bindable(data.get("equity")),
                data["company_handle"],
            ],
        )
        return _to_record(rows[0])

    def find_all(
        self,
        title: Optional[str] = None,
        min_salary: Optional[float] = None,
        has_equity: Optional[bool] = None,
    ) -> List[Dict[str, Any]]:
        """
        List jobs ordered by title, narrowed by whichever filters are given.

        title matches case-insensitively anywhere in the job title,
        min_salary is inclusive and has_equity keeps jobs with non-zero equity.
        """
        rows = self.db.query(f"SELECT {JOB_COLUMNS} FROM jobs ORDER BY title, id")
        criteria = FilterCriteria(
            text_contains=title,
            numeric_min=min_salary,
            flag_required=has_equity,
        )
        return apply_filters([_to_record(r) for r in rows], criteria, JOB_FILTER_FIELDS)

    def find_by_company(self, handle: str) -> List[Dict[str, Any]]:
        rows = self.db.query(
            f"SELECT {JOB_COLUMNS} FROM jobs WHERE company_handle = $1 ORDER BY id",
            [handle],
        )
        return [_to_record(r) for r in rows]

    def get(self, job_id: int) -> Dict[str, Any]:
        """
        Raises:
            NotFoundError: If no job has this id
        """
        rows = self.db.query(f"SELECT {JOB_COLUMNS} FROM jobs WHERE id = $1", [job_id])
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
        return _to_record(rows[0])

    def update(self, job_id: int, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Partial update: only the fields present in data change.

        id and company_handle are ignored if supplied.

        Raises:
            InvalidArgumentError: If nothing updatable is left in data
            NotFoundError: If no job has this id
        """
        payload = [
            (key, _bindable(value))
            for key, value in data.items()
            if key not in IMMUTABLE_FIELDS
        ]
        set_cols, values = build_set_clause(payload)
        id_idx = next_placeholder(values)

        rows = self.db.query(
            f"""UPDATE jobs
                SET {set_cols}
                WHERE id = {id_idx}
                RETURNING {JOB_COLUMNS}""",
            [*values, job_id],
        )
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
        return _to_record(rows[0])

    def remove(self, job_id: int) -> None:
        rows = self.db.query("DELETE FROM jobs WHERE id = $1 RETURNING id", [job_id])
        if not rows:
            raise NotFoundError(f"No job: {job_id}")
