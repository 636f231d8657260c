import os
from datetime import datetime, timedelta

# 必須在匯入 app 之前設定
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("TIMEZONE", "UTC")

import pytest
import pytz
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.database import Base, get_db
from app.main import app
from app.models import User, Job, TimeRecord

API = "/api/v1"


def utc(*args) -> datetime:
    return datetime(*args, tzinfo=pytz.UTC)


class FakeClock:
    """可控制的時鐘，供 ClockService 注入"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make_user(role="employee", name=None, team_id=None, is_premium=False) -> User:
        counter["n"] += 1
        user = User(
            email=f"user{counter['n']}@example.com",
            name=name or f"User {counter['n']}",
            password_hash="not-a-real-hash",
            role=role,
            team_id=team_id,
            is_premium=is_premium,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def make_job(db):
    def _make_job(user: User, hourly_rate=200.0, daily_hour_limit=8.0, status="active", name="Cafe") -> Job:
        job = Job(
            user_id=user.id,
            name=name,
            hourly_rate=hourly_rate,
            daily_hour_limit=daily_hour_limit,
            status=status,
            color="#3b82f6",
        )
        db.add(job)
        db.commit()
        db.refresh(job)
        return job

    return _make_job


@pytest.fixture
def make_record(db):
    def _make_record(user: User, job: Job, clock_in: datetime, clock_out: datetime = None, break_minutes=0) -> TimeRecord:
        record = TimeRecord(
            user_id=user.id,
            job_id=job.id,
            clock_in=clock_in,
            clock_out=clock_out,
            break_minutes=break_minutes,
            is_manual_edit=False,
            date=clock_in.astimezone(pytz.UTC).date(),
        )
        db.add(record)
        db.commit()
        db.refresh(record)
        return record

    return _make_record


@pytest.fixture
def register(client):
    """透過 API 註冊，回傳 (headers, user)"""
    counter = {"n": 0}

    def _register(role="employee", name=None, password="secret123"):
        counter["n"] += 1
        response = client.post(f"{API}/auth/register", json={
            "email": f"api{counter['n']}@example.com",
            "password": password,
            "name": name or f"Api User {counter['n']}",
            "role": role,
        })
        assert response.status_code == 201, response.text
        body = response.json()
        return {"Authorization": f"Bearer {body['accessToken']}"}, body["user"]

    return _register
