"""
Companies Repository.

Responsibilities:
- CRUD operations for the companies table.
- Name / employee-count filtering, pushed down into the WHERE clause.

Non-Responsibilities:
- No authorization decisions.

Invariant:
Listings reject a minimum employee count above the maximum before any SQL
is built.
"""

from typing import Any, Dict, List, Mapping, Optional

from ..database import Database
from ..errors import InvalidArgumentError, NotFoundError
from ..filters import FilterCriteria, FilterFields, build_predicates, where_clause
from ..schema import validate_criteria
from ..sql import build_set_clause, next_placeholder
from .jobs import JobStore

COMPANY_COLUMNS = 'handle, name, description, num_employees AS "numEmployees", logo_url AS "logoUrl"'
COMPANY_FILTER_FIELDS = FilterFields(text="name", numeric="num_employees")
COMPANY_COLUMN_MAP = {"numEmployees": "num_employees", "logoUrl": "logo_url"}


class CompanyStore:
    def __init__(self, db: Database):
        self.db = db

    def create(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Create a company.

        Args:
            data: {handle, name, description, numEmployees, logoUrl}

        Raises:
            InvalidArgumentError: If the handle is already taken
        """
        handle = data["handle"]
        duplicate = self.db.query("SELECT handle FROM companies WHERE handle = $1", [handle])
        if duplicate:
            raise InvalidArgumentError(f"Duplicate company: {handle}")

        rows = self.db.query(
            f"""INSERT INTO companies
                (handle, name, description, num_employees, logo_url)
                VALUES ($1, $2, $3, $4, $5)
                RETURNING {COMPANY_COLUMNS}""",
            [
                handle,
                data["name"],
                data["description"],
                data.get("numEmployees"),
                data.get("logoUrl"),
            ],
        )
        return rows[0]

    def find_all(
        self,
        name_like: Optional[str] = None,
        min_employees: Optional[int] = None,
        max_employees: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        List companies ordered by name.

        Raises:
            InvalidArgumentError: If min_employees > max_employees
        """
        criteria = FilterCriteria(
            text_contains=name_like,
            numeric_min=min_employees,
            numeric_max=max_employees,
        )
        errors = validate_criteria(criteria)
        if errors:
            raise InvalidArgumentError("Invalid query string", errors)

        predicates, values = build_predicates(criteria, COMPANY_FILTER_FIELDS)
        return self.db.query(
            f"""SELECT {COMPANY_COLUMNS}
                FROM companies
                {where_clause(predicates)}
                ORDER BY name""",
            values,
        )

    def get(self, handle: str) -> Dict[str, Any]:
        """
        Returns the company with its jobs.

        Raises:
            NotFoundError: If no company has this handle
        """
        rows = self.db.query(
            f"SELECT {COMPANY_COLUMNS} FROM companies WHERE handle = $1", [handle]
        )
        if not rows:
            raise NotFoundError(f"No company: {handle}")

        company = rows[0]
        company["jobs"] = [
            {k: v for k, v in job.items() if k != "company_handle"}
            for job in JobStore(self.db).find_by_company(handle)
        ]
        return company

    def update(self, handle: str, data: Mapping[str, Any]) -> Dict[str, Any]:
        """
        Partial update of name, description, numEmployees and logoUrl.

        The handle itself cannot change and is ignored if supplied.

        Raises:
            InvalidArgumentError: If nothing updatable is left in data
            NotFoundError: If no company has this handle
        """
        payload = [(key, value) for key, value in data.items() if key != "handle"]
        set_cols, values = build_set_clause(payload, COMPANY_COLUMN_MAP)
        handle_idx = next_placeholder(values)

        rows = self.db.query(
            f"""UPDATE companies
                SET {set_cols}
                WHERE handle = {handle_idx}
                RETURNING {COMPANY_COLUMNS}""",
            [*values, handle],
        )
        if not rows:
            raise NotFoundError(f"No company: {handle}")
        return rows[0]

    def remove(self, handle: str) -> None:
        rows = self.db.query(
            "DELETE FROM companies WHERE handle = $1 RETURNING handle", [handle]
        )
        if not rows:
            raise NotFoundError(f"No company: {handle}")
