"""
Health check endpoint tests.
"""

from httpx import ASGITransport, AsyncClient

from src.db import get_db
from src.main import app


async def test_health_endpoint():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/health")

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "service": "tallyline"}


async def test_liveness():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        response = await ac.get("/api/health/live")

    assert response.json() == {"status": "alive"}


async def test_readiness(db_session):
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    try:
        async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
            response = await ac.get("/api/health/ready")
    finally:
        app.dependency_overrides.clear()

    data = response.json()
    assert data["status"] == "ready"
    assert data["database"] == "connected"
    assert data["commission_sweep"] == "disabled"


def test_scheduler_job_registered():
    from src.scheduler import scheduler, setup_scheduler

    setup_scheduler()
    job = scheduler.get_job("commission_sweep")

    assert job is not None
    assert job.max_instances == 1
    scheduler.remove_job("commission_sweep")
