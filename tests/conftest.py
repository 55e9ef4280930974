from typing import Generator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from cottage_payments.core.config import Settings
from cottage_payments.main import create_app
from cottage_payments.routes.email import get_sendgrid_client
from cottage_payments.routes.payments import get_square_client
from cottage_payments.services.sendgrid_client import SendGridClient
from cottage_payments.services.square_client import SquareClient
from cottage_storefront.core.config import StorefrontSettings
from cottage_storefront.validation import DeliveryDetails

from tests.fakes import FakeSendGrid, FakeSquare


# Mark tests by folder
def pytest_collection_modifyitems(config, items):
    for item in items:
        nodeid = item.nodeid.replace("\\", "/")
        if "tests/unit/" in nodeid:
            item.add_marker(pytest.mark.unit)
        elif "tests/integration/" in nodeid:
            item.add_marker(pytest.mark.integration)


def make_settings(**overrides) -> Settings:
    values = {
        "square_access_token": "EAAA-test-token",
        "square_location_id": "LOC123",
        "square_environment": "sandbox",
        "sendgrid_api_key": "SG.test-key",
        "from_email": "orders@littleloaf.test",
        "allowed_origins": "*",
        "allowed_currencies": "USD",
        "debug_payments": False,
        "debug_send_email": False,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def make_storefront_settings(**overrides) -> StorefrontSettings:
    values = {
        "backend_base_url": "http://testserver",
        "square_application_id": "sandbox-sq0idb-app",
        "square_location_id": "LOC123",
        "admin_email": "owner@littleloaf.test",
        "local_dev": False,
    }
    values.update(overrides)
    return StorefrontSettings(_env_file=None, **values)


def make_details(**overrides) -> DeliveryDetails:
    values = {
        "name": "Ada Baker",
        "email": "ada@example.com",
        "phone": "555-0100",
        "address": "1 Crumb Lane",
        "city": "Breadville",
        "zip_code": "12345",
        "delivery_date": "2026-10-24",
        "delivery_time": "09:00",
    }
    values.update(overrides)
    return DeliveryDetails(**values)


def override_providers(app: FastAPI, settings: Settings, square: FakeSquare, sendgrid: FakeSendGrid) -> None:
    """Route the app's provider clients to the fakes"""

    async def _square():
        client = SquareClient(
            access_token=settings.square_access_token,
            location_id=settings.square_location_id,
            base_url=settings.square_base_url,
            api_version=settings.square_api_version,
            note=settings.payment_note,
            transport=square.transport(),
        )
        try:
            yield client
        finally:
            await client.close()

    async def _sendgrid():
        client = SendGridClient(api_key=settings.sendgrid_api_key, transport=sendgrid.transport())
        try:
            yield client
        finally:
            await client.close()

    app.dependency_overrides[get_square_client] = _square
    app.dependency_overrides[get_sendgrid_client] = _sendgrid


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def storefront_settings() -> StorefrontSettings:
    return make_storefront_settings()


@pytest.fixture
def square() -> FakeSquare:
    return FakeSquare()


@pytest.fixture
def sendgrid() -> FakeSendGrid:
    return FakeSendGrid()


@pytest.fixture
def build_client(square, sendgrid):
    """Factory: TestClient for an app built with the given settings"""
    clients = []

    def _build(settings: Settings) -> TestClient:
        app = create_app(settings)
        override_providers(app, settings, square, sendgrid)
        client = TestClient(app)
        clients.append(client)
        return client

    yield _build
    for client in clients:
        client.app.dependency_overrides.clear()


@pytest.fixture
def client(build_client, settings) -> Generator[TestClient, None, None]:
    yield build_client(settings)
