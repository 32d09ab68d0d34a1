"""
Tests for repositories/users.py - users, credentials and applications.
"""

import pytest

from jobboard.errors import InvalidArgumentError, NotFoundError, UnauthorizedError


class TestAuthenticate:
    """Test credential checks."""

    def test_works(self, seeded_db, user_store):
        user = user_store.authenticate("u1", "password1")
        assert user == {
            "username": "u1",
            "firstName": "U1F",
            "lastName": "U1L",
            "email": "user1@user.com",
            "isAdmin": False,
        }

    def test_unknown_user(self, seeded_db, user_store):
        with pytest.raises(UnauthorizedError):
            user_store.authenticate("nope", "password")

    def test_wrong_password(self, seeded_db, user_store):
        with pytest.raises(UnauthorizedError, match="Invalid username/password"):
            user_store.authenticate("u1", "wrong")


class TestRegister:
    """Test registration."""

    def test_works(self, db, user_store):
        user = user_store.register("new", "password", "Test", "Tester", "test@test.com")
        assert user == {
            "username": "new",
            "firstName": "Test",
            "lastName": "Tester",
            "email": "test@test.com",
            "isAdmin": False,
        }

        rows = db.query("SELECT password FROM users WHERE username = $1", ["new"])
        assert rows[0]["password"].startswith("$2b$")

    def test_admin(self, db, user_store):
        user = user_store.register("boss", "password", "B", "S", "boss@test.com", is_admin=True)
        assert user["isAdmin"] is True

    def test_duplicate(self, db, user_store):
        user_store.register("new", "password", "Test", "Tester", "test@test.com")
        with pytest.raises(InvalidArgumentError, match="Duplicate username: new"):
            user_store.register("new", "password", "Test", "Tester", "test@test.com")


class TestFindAll:
    def test_works(self, seeded_db, user_store, job_ids):
        user_store.apply_to_job("u1", job_ids[2])
        user_store.apply_to_job("u1", job_ids[0])

        users = user_store.find_all()
        assert [u["username"] for u in users] == ["u1", "u2"]
        assert users[0]["jobs"] == sorted([job_ids[0], job_ids[2]])
        assert users[1]["jobs"] == []
        assert users[1]["isAdmin"] is True
        assert all("password" not in u for u in users)


class TestGet:
    def test_works(self, seeded_db, user_store, job_ids):
        user_store.apply_to_job("u2", job_ids[1])
        user = user_store.get("u2")
        assert user["username"] == "u2"
        assert user["jobs"] == [job_ids[1]]

    def test_not_found(self, seeded_db, user_store):
        with pytest.raises(NotFoundError, match="No user: nope"):
            user_store.get("nope")


class TestUpdate:
    """Test partial updates with camelCase -> column mapping."""

    def test_works(self, seeded_db, user_store):
        user = user_store.update("u1", {"firstName": "NewF", "email": "new@email.com"})
        assert user == {
            "username": "u1",
            "firstName": "NewF",
            "lastName": "U1L",
            "email": "new@email.com",
            "isAdmin": False,
        }

    def test_set_admin(self, seeded_db, user_store):
        assert user_store.update("u1", {"isAdmin": True})["isAdmin"] is True

    def test_set_password(self, seeded_db, user_store):
        user_store.update("u1", {"password": "new-password"})
        assert user_store.authenticate("u1", "new-password")["username"] == "u1"

        rows = seeded_db.query("SELECT password FROM users WHERE username = $1", ["u1"])
        assert rows[0]["password"].startswith("$2b$")

    @pytest.mark.parametrize("password", [None, 12345, b"bytes"])
    def test_password_must_be_string(self, seeded_db, user_store, password):
        with pytest.raises(InvalidArgumentError, match="Password must be a string"):
            user_store.update("u1", {"password": password})
        assert user_store.authenticate("u1", "password1")["username"] == "u1"

    def test_username_is_ignored(self, seeded_db, user_store):

        user = user_store.update("u1", {"username": "hacker", "lastName": "L"})
        assert user["username"] == "u1"

    def test_not_found(self, seeded_db, user_store):
        with pytest.raises(NotFoundError):
            user_store.update("nope", {"firstName": "test"})

    def test_no_data(self, seeded_db, user_store):
        with pytest.raises(InvalidArgumentError):
            user_store.update("u1", {})


class TestRemove:
    def test_works(self, seeded_db, user_store):
        user_store.remove("u1")
        assert seeded_db.query("SELECT * FROM users WHERE username = $1", ["u1"]) == []

    def test_removes_applications(self, seeded_db, user_store, job_ids):
        user_store.apply_to_job("u1", job_ids[0])
        user_store.remove("u1")
        assert seeded_db.query("SELECT * FROM applications") == []

    def test_not_found(self, seeded_db, user_store):
        with pytest.raises(NotFoundError):
            user_store.remove("nope")


class TestApplyToJob:
    """Test job applications."""

    def test_works(self, seeded_db, user_store, job_ids):
        assert user_store.apply_to_job("u1", job_ids[0]) == job_ids[0]
        rows = seeded_db.query("SELECT username, job_id FROM applications")
        assert rows == [{"username": "u1", "job_id": job_ids[0]}]

    def test_twice(self, seeded_db, user_store, job_ids):
        user_store.apply_to_job("u1", job_ids[0])
        with pytest.raises(InvalidArgumentError, match="Already applied"):
            user_store.apply_to_job("u1", job_ids[0])

    def test_no_such_job(self, seeded_db, user_store):
        with pytest.raises(NotFoundError, match="No job: 0"):
            user_store.apply_to_job("u1", 0)

    def test_no_such_user(self, seeded_db, user_store, job_ids):
        with pytest.raises(NotFoundError, match="No user: nope"):
            user_store.apply_to_job("nope", job_ids[0])
