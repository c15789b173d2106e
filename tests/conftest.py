"""Pytest fixtures for HRMS tests.

Every test gets its own in-memory SQLite database. StaticPool keeps the
single connection alive so the schema, the test session and any sessions
opened by the API layer all see the same data.
"""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hrms_core.database import enable_sqlite_savepoints, make_session_factory
from hrms_core.models import (
    Base,
    ComplianceJurisdiction,
    Department,
    Employee,
    LeaveType,
    Location,
    Organization,
    User,
)
from hrms_core.services import (
    ComplianceService,
    DepartmentData,
    DepartmentService,
    EmployeeData,
    EmployeeService,
    LeaveService,
    LeaveTypeData,
    LocationData,
    LocationService,
    OrganizationData,
    OrganizationService,
    UserData,
    UserService,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

TEST_PASSWORD = "correct-horse-battery"


@pytest_asyncio.fixture
async def engine():
    """Create test database engine with the full schema."""
    engine = enable_sqlite_savepoints(
        create_async_engine(
            TEST_DATABASE_URL,
            echo=False,
            poolclass=StaticPool,
            connect_args={"check_same_thread": False},
        )
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(engine) -> async_sessionmaker[AsyncSession]:
    return make_session_factory(engine)


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def test_organization(session: AsyncSession) -> Organization:
    return await OrganizationService(session).create_organization(
        OrganizationData(
            name="Acme Corp",
            legal_name="Acme Corporation Inc.",
            tax_id="12-3456789",
            industry="Technology",
            company_size="MEDIUM",
            headquarters_country="US",
        )
    )


@pytest_asyncio.fixture
async def test_location(session: AsyncSession, test_organization: Organization) -> Location:
    return await LocationService(session).create_location(
        LocationData(
            organization_id=test_organization.organization_id,
            name="Head Office",
            city="Springfield",
            state_province="IL",
            country="US",
            is_headquarters=True,
        )
    )


@pytest_asyncio.fixture
async def test_department(session: AsyncSession, test_organization: Organization) -> Department:
    return await DepartmentService(session).create_department(
        DepartmentData(
            organization_id=test_organization.organization_id,
            name="Engineering",
            code="ENG",
        )
    )


@pytest_asyncio.fixture
async def test_employee(
    session: AsyncSession,
    test_organization: Organization,
    test_department: Department,
) -> Employee:
    """Salaried full-time employee earning 5000 a month."""
    return await EmployeeService(session).create_employee(
        EmployeeData(
            organization_id=test_organization.organization_id,
            employee_number="E001",
            first_name="Jane",
            last_name="Doe",
            work_email="jane.doe@acme.test",
            department_id=test_department.department_id,
            job_title="Software Engineer",
            hire_date=date(2024, 1, 15),
            salary_amount=Decimal("5000.00"),
        )
    )


@pytest_asyncio.fixture
async def test_hourly_employee(
    session: AsyncSession, test_organization: Organization
) -> Employee:
    """Part-time employee paid 25 an hour."""
    return await EmployeeService(session).create_employee(
        EmployeeData(
            organization_id=test_organization.organization_id,
            employee_number="E002",
            first_name="John",
            last_name="Smith",
            employment_type="PART_TIME",
            hire_date=date(2024, 3, 1),
            hourly_rate=Decimal("25.00"),
        )
    )


@pytest_asyncio.fixture
async def test_user(session: AsyncSession, test_organization: Organization) -> User:
    return await UserService(session).create_user(
        UserData(
            organization_id=test_organization.organization_id,
            username="admin",
            email="admin@acme.test",
            first_name="Ada",
            last_name="Admin",
        ),
        TEST_PASSWORD,
    )


@pytest_asyncio.fixture
async def test_jurisdiction(session: AsyncSession) -> ComplianceJurisdiction:
    return await ComplianceService(session).create_jurisdiction(
        name="United States",
        code="US",
        jurisdiction_type="FEDERAL",
        country_code="US",
    )


@pytest_asyncio.fixture
async def test_leave_type(session: AsyncSession, test_organization: Organization) -> LeaveType:
    """Annual leave: 20 days, approval required, up to 5 days carried forward."""
    return await LeaveService(session).create_leave_type(
        LeaveTypeData(
            organization_id=test_organization.organization_id,
            name="Annual Leave",
            code="AL",
            category="VACATION",
            max_days_per_year=Decimal("20"),
            is_carry_forward=True,
            max_carry_forward_days=Decimal("5"),
        )
    )
