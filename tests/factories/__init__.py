"""Test factories for generating test data.

Re-exports all factories for convenient imports:
    from tests.factories import ProjectCreateFactory, project_payload, ...
"""

from tests.factories.auth import (
    DEFAULT_TEST_PASSWORD,
    CredentialsFactory,
    federated_id_token,
    unique_email,
)
from tests.factories.base import BaseFactory, future_deadline, utc_now
from tests.factories.records import (
    BriefCreateFactory,
    ProjectCreateFactory,
    brief_payload,
    project_payload,
)

__all__ = [
    # Base
    "BaseFactory",
    "future_deadline",
    "utc_now",
    # Auth
    "DEFAULT_TEST_PASSWORD",
    "CredentialsFactory",
    "federated_id_token",
    "unique_email",
    # Records
    "BriefCreateFactory",
    "ProjectCreateFactory",
    "brief_payload",
    "project_payload",
]
