"""
pytest configuration and fixtures for the case review test suite
Fixed clock, fresh stores and sample submission inputs
"""

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

import pytest

from case_review.services.cases_service import CaseStore


class FakeClock:
    """Deterministic clock; advance() moves time forward, set() can move it anywhere"""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now = self.now + timedelta(**kwargs)
        return self.now

    def set(self, value: datetime) -> None:
        self.now = value


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2024, 1, 15, 9, 0, tzinfo=timezone.utc))


@pytest.fixture
def store(clock) -> CaseStore:
    """Fresh store with required-document enforcement off"""
    return CaseStore(clock=clock)


@pytest.fixture
def enforcing_store(clock) -> CaseStore:
    return CaseStore(enforce_required_documents=True, clock=clock)


@pytest.fixture
def client_info() -> Dict[str, Any]:
    return {
        "client_name": "Acme Corporation",
        "address": "123 Business Ave, New York, NY 10001",
        "date_of_information": "2024-01-15",
        "account_id": "C12345",
        "email": "contact@acme.com",
    }


@pytest.fixture
def address_update() -> List[Dict[str, Any]]:
    return [{"change_request_id": "cr-1", "hdi_number": "HDI-001", "country": "United States", "type_of_change": "Address Update"}]


@pytest.fixture
def pending_case(store, client_info, address_update):
    return store.create_case(client_info, address_update)


@pytest.fixture
def okw_case(store, pending_case):
    """Case assigned to the OKW team at intake"""
    return store.assign_intake(pending_case.case_id)


@pytest.fixture
def cdd_case(store, okw_case):
    """Case moved forward to the CDD team"""
    return store.update_status(okw_case.case_id, "with-cdd", None, "okw")
