"""
RANZ Wage Survey - Test Configuration and Fixtures
"""
import os
from typing import AsyncGenerator, List
import pytest
from httpx import AsyncClient, ASGITransport
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession
from faker import Faker

# Set testing environment
os.environ['TESTING'] = 'true'
os.environ['ENVIRONMENT'] = 'testing'
os.environ['DATABASE_URL'] = 'sqlite+aiosqlite:///./test.db'
os.environ['JWT_SECRET_KEY'] = 'test-jwt-secret-key-for-testing-only'
os.environ['BCRYPT_ROUNDS'] = '4'
os.environ['RATE_LIMIT_ENABLED'] = 'false'
os.environ['LOG_FILE'] = ''

from app.main import app
from app.core.config import settings
from app.core.database import Base, Database, get_db
from app.core.security import get_password_hash, create_access_token
from app.models.user import User

fake = Faker()

STAFF_PASSWORD = 'staffpassword123'

# Test database setup
test_database = Database(settings)
test_database.connect()


@pytest.fixture(scope='function')
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a fresh database session for each test"""
    async with test_database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with test_database.session() as session:
        yield session
        await session.rollback()

    async with test_database.engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create test client with database override"""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.state.database = test_database

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

    app.dependency_overrides.clear()


@pytest.fixture
def query_log(client: AsyncClient) -> List[str]:
    """SQL statements executed after the client is ready"""
    statements: List[str] = []

    def record(conn, cursor, statement, parameters, context, executemany):
        statements.append(statement)

    engine = test_database.engine.sync_engine
    event.listen(engine, 'before_cursor_execute', record)
    yield statements
    event.remove(engine, 'before_cursor_execute', record)


async def _create_user(db_session: AsyncSession, must_change_password: bool) -> User:
    user = User(
        email=fake.unique.email().lower(),
        password_hash=get_password_hash(STAFF_PASSWORD),
        must_change_password=must_change_password,
    )
    db_session.add(user)
    await db_session.commit()
    await db_session.refresh(user)
    return user


@pytest.fixture
async def staff_user(db_session: AsyncSession) -> User:
    """Staff user who has already changed the initial password"""
    return await _create_user(db_session, must_change_password=False)


@pytest.fixture
async def new_staff_user(db_session: AsyncSession) -> User:
    """Freshly provisioned staff user who must change the password"""
    return await _create_user(db_session, must_change_password=True)


@pytest.fixture
def auth_headers(staff_user: User) -> dict:
    """Authentication headers for a fully authorized staff user"""
    token = create_access_token(staff_user.email, must_change_password=False)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def forced_change_headers(new_staff_user: User) -> dict:
    """Authentication headers carrying the forced-change flag"""
    token = create_access_token(new_staff_user.email, must_change_password=True)
    return {'Authorization': f'Bearer {token}'}


@pytest.fixture
def survey_payload() -> dict:
    """Typical form submission"""
    return {
        'company': {
            'companyName': 'Acme Roofing',
            'ranzMemberNumber': 'R-1042',
            'region': 'Auckland',
            'totalStaff': '12',
            'isLbp': True,
        },
        'rates': {
            'foreman': {
                '3_years': {'hourlyRate': '32.50', 'chargeOutRate': '65.00'},
                '8_plus': {'hourlyRate': '38.00'},
            },
            'labourer': {
                '1_year': {'hourlyRate': '', 'chargeOutRate': ''},
                '3_years': {'chargeOutRate': '48'},
            },
        },
        'overtime': {'hoursBeforeOvertime': '40', 'overtimeMultiplier': '1.5', 'notes': 'Time and a half'},
        'mileage': {'perKmRate': '0.95', 'flatDailyRate': '', 'notes': ''},
        'otherBenefits': 'Tool allowance',
    }


@pytest.fixture
def staff_password() -> str:
    """Password of the staff_user and new_staff_user fixtures"""
    return STAFF_PASSWORD
