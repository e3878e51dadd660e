from unittest import mock

import pytest
from django.db import DatabaseError  # type: ignore
from django.urls import reverse  # type: ignore


@pytest.mark.django_db
def test_healthz_reports_database(client):
    response = client.get(reverse("healthz"))

    assert response.status_code == 200
    assert response.json() == {"status": "healthy", "database": "connected"}


@pytest.mark.django_db
def test_healthz_unhealthy_when_database_fails(client):
    with mock.patch("config.views.connection.cursor", side_effect=DatabaseError("down")):
        response = client.get(reverse("healthz"))

    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"
