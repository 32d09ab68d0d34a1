"""
Tests for app.py - the command line interface.
"""

import json

import pytest

from jobboard import __version__
from jobboard.app import main, parse_assignments
from jobboard.errors import InvalidArgumentError


@pytest.fixture(autouse=True)
def quiet_logs(monkeypatch):
    """Keep log lines out of the JSON printed on stdout."""
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.delenv("LOG_DIR", raising=False)


def run(capsys, *argv):
    main(list(argv))
    return json.loads(capsys.readouterr().out)


class TestParseAssignments:
    def test_json_values_decoded(self):
        assert parse_assignments(["salary=100", "isAdmin=true", "equity=\"0.5\""]) == {
            "salary": 100,
            "isAdmin": True,
            "equity": "0.5",
        }

    def test_plain_strings_kept(self):
        assert parse_assignments(["title=Data Engineer", "logoUrl=http://x.img"]) == {
            "title": "Data Engineer",
            "logoUrl": "http://x.img",
        }

    def test_value_may_contain_equals(self):
        assert parse_assignments(["description=a=b"]) == {"description": "a=b"}

    def test_missing_equals(self):
        with pytest.raises(InvalidArgumentError):
            parse_assignments(["title"])


class TestCommands:
    """Test CLI commands against a seeded database."""

    def test_version(self, capsys):
        main(["--version"])
        assert capsys.readouterr().out.strip() == __version__

    def test_init_db(self, tmp_path, capsys):
        url = f"sqlite:///{tmp_path / 'cli.db'}"
        main(["--database-url", url, "init-db"])
        assert "Initialized database" in capsys.readouterr().out
        assert (tmp_path / "cli.db").exists()

    def test_jobs_list_filters(self, seeded_db, db_url, capsys):
        body = run(capsys, "--database-url", db_url, "jobs", "list", "--title", "2")
        assert [j["title"] for j in body["jobs"]] == ["title2", "title2"]

        body = run(capsys, "--database-url", db_url, "jobs", "list",
                   "--min-salary", "250000", "--has-equity")
        assert [j["salary"] for j in body["jobs"]] == [300000]
        assert body["jobs"][0]["equity"] == "0.03"

    def test_jobs_get_and_update(self, job_ids, db_url, capsys):
        body = run(capsys, "--database-url", db_url, "jobs", "update", str(job_ids[0]),
                   "--set", "salary=1", "--set", "title=Renamed")
        assert body["job"]["salary"] == 1
        assert body["job"]["title"] == "Renamed"

        body = run(capsys, "--database-url", db_url, "jobs", "get", str(job_ids[0]))
        assert body["job"]["title"] == "Renamed"

    def test_companies_list(self, seeded_db, db_url, capsys):
        body = run(capsys, "--database-url", db_url, "companies", "list",
                   "--name-like", "c", "--max-employees", "2")
        assert [c["handle"] for c in body["companies"]] == ["c1", "c2"]

    def test_companies_get_and_update(self, seeded_db, db_url, capsys):
        body = run(capsys, "--database-url", db_url, "companies", "update", "c1",
                   "--set", "numEmployees=12", "--set", "logoUrl=http://new.img")
        assert body["company"]["numEmployees"] == 12
        assert body["company"]["logoUrl"] == "http://new.img"

        body = run(capsys, "--database-url", db_url, "companies", "get", "c1")
        assert body["company"]["numEmployees"] == 12
        assert len(body["company"]["jobs"]) == 1

    def test_users_list(self, seeded_db, db_url, capsys):
        body = run(capsys, "--database-url", db_url, "users", "list")
        assert [u["username"] for u in body["users"]] == ["u1", "u2"]


class TestErrors:
    """Test that data-layer errors become a clean exit with a JSON body."""

    def test_invalid_range(self, seeded_db, db_url, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--database-url", db_url, "companies", "list",
                  "--min-employees", "2", "--max-employees", "1"])

        assert exc_info.value.code == 2
        body = json.loads(capsys.readouterr().err)
        assert body == {
            "error": {
                "message": "Invalid query string",
                "status": 400,
                "errors": ["Minimum cannot be greater than maximum"],
            }
        }

    def test_bad_number(self, seeded_db, db_url, capsys):
        with pytest.raises(SystemExit) as exc_info:
            main(["--database-url", db_url, "jobs", "list", "--min-salary", "lots"])
        assert exc_info.value.code == 2
        body = json.loads(capsys.readouterr().err)
        assert body["error"]["errors"] == ["Field 'minSalary' must be a number"]

    def test_not_found(self, seeded_db, db_url, capsys):
        with pytest.raises(SystemExit):
            main(["--database-url", db_url, "jobs", "update", "999", "--set", "salary=1"])
        body = json.loads(capsys.readouterr().err)
        assert body == {"error": {"message": "No job: 999", "status": 404}}
