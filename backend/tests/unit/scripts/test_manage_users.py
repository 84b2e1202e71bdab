"""
Tests for the staff user management command
"""
import pytest
from sqlalchemy import select

from app.core.config import Settings
from app.core.database import Database
from app.core.exceptions import ValidationError
from app.core.security import verify_password
from app.models.user import User
from app.scripts.manage_users import create_parser, run


@pytest.fixture
def database_url(tmp_path):
    return f"sqlite+aiosqlite:///{tmp_path / 'users.db'}"


def make_database(database_url):
    return Database(Settings(DATABASE_URL=database_url))


async def fetch_user(database_url, email):
    database = make_database(database_url)
    try:
        async with database.session() as session:
            result = await session.execute(select(User).where(User.email == email))
            return result.scalar_one_or_none()
    finally:
        await database.dispose()


class TestParser:
    """Test command line parsing"""

    def test_create_with_password(self):
        args = create_parser().parse_args(["create", "staff@ranz.co.nz", "--password", "TempPass123"])

        assert args.command == "create"
        assert args.email == "staff@ranz.co.nz"
        assert args.password == "TempPass123"

    def test_command_required(self):
        with pytest.raises(SystemExit):
            create_parser().parse_args([])


class TestRun:
    """Test executing commands against a scratch database"""

    @pytest.mark.asyncio
    async def test_init_db(self, database_url):
        message = await run(create_parser().parse_args(["init-db"]), make_database(database_url))

        assert message == "Database tables ready"

    @pytest.mark.asyncio
    async def test_create_user(self, database_url):
        args = create_parser().parse_args(["create", "Staff@RANZ.co.nz", "--password", "TempPass123"])

        message = await run(args, make_database(database_url))

        assert "Created staff user staff@ranz.co.nz" in message
        user = await fetch_user(database_url, "staff@ranz.co.nz")
        assert user.must_change_password is True
        assert verify_password("TempPass123", user.password_hash)

    @pytest.mark.asyncio
    async def test_create_generates_password(self, database_url):
        message = await run(
            create_parser().parse_args(["create", "staff@ranz.co.nz"]),
            make_database(database_url),
        )

        password = message.splitlines()[1].split(": ", 1)[1]
        user = await fetch_user(database_url, "staff@ranz.co.nz")
        assert verify_password(password, user.password_hash)

    @pytest.mark.asyncio
    async def test_create_duplicate(self, database_url):
        args = create_parser().parse_args(["create", "staff@ranz.co.nz"])
        await run(args, make_database(database_url))

        with pytest.raises(ValidationError):
            await run(args, make_database(database_url))

    @pytest.mark.asyncio
    async def test_reset_password(self, database_url):
        parser = create_parser()
        await run(parser.parse_args(["create", "staff@ranz.co.nz"]), make_database(database_url))

        message = await run(
            parser.parse_args(["reset", "staff@ranz.co.nz", "--password", "ResetPass123"]),
            make_database(database_url),
        )

        assert "Reset password for staff@ranz.co.nz" in message
        user = await fetch_user(database_url, "staff@ranz.co.nz")
        assert user.must_change_password is True
        assert verify_password("ResetPass123", user.password_hash)
