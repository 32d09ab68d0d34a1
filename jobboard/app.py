import argparse
import json
import sys
from typing import Any, Dict, List, Optional

from . import __version__
from .config import get_database_uri, load_env
from .database import Database, init_database
from .errors import InvalidArgumentError, JobBoardError
from .repositories import CompanyStore, JobStore, UserStore
from .schema import parse_company_filters, parse_job_filters


def _print_json(data: Any) -> None:
    # Decimal equity values print as strings
    print(json.dumps(data, indent=2, default=str))


def _open_db(args: argparse.Namespace) -> Database:
    return Database.from_url(args.database_url or get_database_uri())


def _drop_none(args: Dict[str, Any]) -> Dict[str, Any]:
    return {k: v for k, v in args.items() if v is not None}


def parse_assignments(pairs: List[str]) -> Dict[str, Any]:
    """Turn ["title=New", "salary=100"] into a payload, decoding JSON values.

    Values that are not valid JSON are kept as plain strings.
    """
    payload: Dict[str, Any] = {}
    for pair in pairs:
        if "=" not in pair:
            raise InvalidArgumentError(f"Expected field=value, got: {pair}")
        key, raw = pair.split("=", 1)
        key = key.strip()
        try:
            payload[key] = json.loads(raw)
        except ValueError:
            payload[key] = raw
    return payload


def cmd_init_db(args: argparse.Namespace) -> None:
    url = args.database_url or get_database_uri()
    init_database(url).dispose()
    print(f"Initialized database: {url}")


def cmd_companies_list(args: argparse.Namespace) -> None:
    criteria = parse_company_filters(_drop_none({
        "nameLike": args.name_like,
        "minEmployees": args.min_employees,
        "maxEmployees": args.max_employees,
    }))
    companies = CompanyStore(_open_db(args)).find_all(
        name_like=criteria.text_contains,
        min_employees=criteria.numeric_min,
        max_employees=criteria.numeric_max,
    )
    _print_json({"companies": companies})


def cmd_companies_get(args: argparse.Namespace) -> None:
    _print_json({"company": CompanyStore(_open_db(args)).get(args.handle)})


def cmd_companies_update(args: argparse.Namespace) -> None:
    company = CompanyStore(_open_db(args)).update(args.handle, parse_assignments(args.set))
    _print_json({"company": company})


def cmd_jobs_list(args: argparse.Namespace) -> None:
    criteria = parse_job_filters(_drop_none({
        "title": args.title,
        "minSalary": args.min_salary,
        "hasEquity": "true" if args.has_equity else None,
    }))
    jobs = JobStore(_open_db(args)).find_all(
        title=criteria.text_contains,
        min_salary=criteria.numeric_min,
        has_equity=criteria.flag_required,
    )
    _print_json({"jobs": jobs})


def cmd_jobs_get(args: argparse.Namespace) -> None:
    _print_json({"job": JobStore(_open_db(args)).get(args.id)})


def cmd_jobs_update(args: argparse.Namespace) -> None:
    job = JobStore(_open_db(args)).update(args.id, parse_assignments(args.set))
    _print_json({"job": job})


def cmd_users_list(args: argparse.Namespace) -> None:
    _print_json({"users": UserStore(_open_db(args)).find_all()})


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="jobboard", description="Job board data layer CLI")
    parser.add_argument("--version", action="store_true", help="Show version")
    parser.add_argument("--database-url", help="SQLAlchemy URL (or set DATABASE_URL)")

    subparsers = parser.add_subparsers(dest="command")
    init = subparsers.add_parser("init-db", help="Create the tables")
    init.set_defaults(func=cmd_init_db)

    companies = subparsers.add_parser("companies", help="Companies")
    company_cmds = companies.add_subparsers(dest="action", required=True)
    c_list = company_cmds.add_parser("list", help="List companies, optionally filtered")
    c_list.add_argument("--name-like", help="Case-insensitive name fragment")
    c_list.add_argument("--min-employees", help="Inclusive lower bound")
    c_list.add_argument("--max-employees", help="Inclusive upper bound")
    c_list.set_defaults(func=cmd_companies_list)
    c_get = company_cmds.add_parser("get", help="Show one company and its jobs")
    c_get.add_argument("handle")
    c_get.set_defaults(func=cmd_companies_get)
    c_upd = company_cmds.add_parser("update", help="Patch a company")
    c_upd.add_argument("handle")
    c_upd.add_argument("--set", action="append", required=True, metavar="FIELD=VALUE",
                       help="Field to change; repeatable. Example: --set numEmployees=12")
    c_upd.set_defaults(func=cmd_companies_update)

    jobs = subparsers.add_parser("jobs", help="Jobs")
    job_cmds = jobs.add_subparsers(dest="action", required=True)
    j_list = job_cmds.add_parser("list", help="List jobs, optionally filtered")
    j_list.add_argument("--title", help="Case-insensitive title fragment")
    j_list.add_argument("--min-salary", help="Inclusive lower bound")
    j_list.add_argument("--has-equity", action="store_true", help="Only jobs with non-zero equity")
    j_list.set_defaults(func=cmd_jobs_list)
    j_get = job_cmds.add_parser("get", help="Show one job")
    j_get.add_argument("id", type=int)
    j_get.set_defaults(func=cmd_jobs_get)
    j_upd = job_cmds.add_parser("update", help="Patch a job")
    j_upd.add_argument("id", type=int)
    j_upd.add_argument("--set", action="append", required=True, metavar="FIELD=VALUE",
                       help="Field to change; repeatable. Example: --set salary=90000")
    j_upd.set_defaults(func=cmd_jobs_update)

    users = subparsers.add_parser("users", help="Users")
    user_cmds = users.add_subparsers(dest="action", required=True)
    u_list = user_cmds.add_parser("list", help="List users with their applications")
    u_list.set_defaults(func=cmd_users_list)

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    # Load .env early (DATABASE_URL, LOG_LEVEL, etc.)
    load_env()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.version:
        print(__version__)
        return

    if hasattr(args, "func"):
        try:
            args.func(args)
        except JobBoardError as e:
            print(json.dumps({"error": e.to_dict()}, indent=2), file=sys.stderr)
            raise SystemExit(2)
        return

    parser.print_help()


if __name__ == "__main__":
    main()
