"""
Demo cases for local development (SEED_DEMO_CASES)
"""

import logging
from typing import List

from case_review.models.case import Case
from case_review.models.enums import CaseStatus, Role
from case_review.services.cases_service import CaseStore
from case_review.services.document_requirements import STANDARD_DOCUMENT_NAMES

logger = logging.getLogger(__name__)

def _standard_documents(uploaded=()) -> List[dict]:
    return [
        {"name": name, "uploaded": name in uploaded, "file_handle": f"demo/{name}.pdf" if name in uploaded else None}
        for name in STANDARD_DOCUMENT_NAMES
    ]

def seed_demo_cases(store: CaseStore) -> List[Case]:
    """Create the two demo cases through the regular store operations"""
    acme = store.create_case(
        client_info={
            "client_name": "Acme Corporation",
            "address": "123 Business Ave, New York, NY 10001",
            "date_of_information": "2024-01-15",
            "account_id": "C12345",
            "email": "contact@acme.com",
        },
        change_requests=[
            {"hdi_number": "HDI-001", "country": "United States", "type_of_change": "Address Update"},
        ],
        documents=_standard_documents(uploaded=("Proof of Address", "Certificate of Incorporation")),
    )
    acme = store.assign_intake(acme.case_id)

    global_tech = store.create_case(
        client_info={
            "client_name": "Global Tech Solutions",
            "address": "456 Tech Blvd, San Francisco, CA 94105",
            "date_of_information": "2024-01-18",
            "account_id": "C67890",
            "email": "info@globaltech.io",
        },
        change_requests=[
            {"hdi_number": "HDI-002", "country": "United States", "type_of_change": "Entity Type Change"},
        ],
        documents=_standard_documents(uploaded=("Certificate of Incorporation", "Board Resolution")),
    )
    global_tech = store.update_status(global_tech.case_id, CaseStatus.WITH_CDD, None, Role.OKW)

    logger.info("Seeded 2 demo cases")
    return [acme, global_tech]
