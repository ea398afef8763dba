from __future__ import annotations

import pytest
from flask.testing import FlaskClient

from smartplan.app import create_app
from smartplan.config import AppSettings


@pytest.fixture()
def client() -> FlaskClient:
    app = create_app(AppSettings())
    app.config["TESTING"] = True
    with app.test_client() as test_client:
        yield test_client
