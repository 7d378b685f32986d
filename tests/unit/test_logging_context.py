"""Tests for structured logging context."""

import pytest
import structlog
from structlog.testing import CapturingLogger

from monteerly.core.logging import (
    bind_request_context,
    bind_session_context,
    clear_request_context,
)

pytestmark = pytest.mark.unit


@pytest.fixture
def capturing_logger():
    cap_logger = CapturingLogger()
    old_config = structlog.get_config()

    structlog.configure(
        processors=[structlog.contextvars.merge_contextvars],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=lambda *args, **kwargs: cap_logger,
        cache_logger_on_first_use=False,
    )

    clear_request_context()
    yield cap_logger
    clear_request_context()
    structlog.configure(**old_config)


def test_request_id_is_bound(capturing_logger):
    bind_request_context("req-123")
    structlog.get_logger().info("hello")

    assert capturing_logger.calls[0].kwargs["request_id"] == "req-123"


def test_missing_request_id_is_not_bound(capturing_logger):
    bind_request_context(None)
    structlog.get_logger().info("hello")

    assert "request_id" not in capturing_logger.calls[0].kwargs


def test_session_uid_follows_sign_in_and_out(capturing_logger):
    logger = structlog.get_logger()

    bind_session_context("uid-7")
    logger.info("signed in")
    bind_session_context(None)
    logger.info("signed out")

    first, second = capturing_logger.calls
    assert first.kwargs["session_uid"] == "uid-7"
    assert "session_uid" not in second.kwargs


def test_clear_drops_everything(capturing_logger):
    bind_request_context("req-1")
    bind_session_context("uid-1")

    clear_request_context()
    structlog.get_logger().info("after")

    kwargs = capturing_logger.calls[0].kwargs
    assert "request_id" not in kwargs
    assert "session_uid" not in kwargs
