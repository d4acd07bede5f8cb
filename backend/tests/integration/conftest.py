"""Fixtures shared by the integration tests."""

import pytest
from unittest.mock import patch


@pytest.fixture(autouse=True)
def mock_notifications():
    """
    Replace background notification dispatch with a mock.

    Tests can assert on `mock_notifications.call_args_list`; each call is
    (NotificationEvent, Appointment).
    """
    with patch("services.notification_service.NotificationService.dispatch") as mock_dispatch:
        mock_dispatch.return_value = None
        yield mock_dispatch
