"""
Decision notification emails using Resend API
"""

import logging
from typing import Any, Dict, Optional

import resend

from case_review.models.case import Case
from case_review.models.enums import CaseStatus
from case_review.services.cases_service import CaseEvent

logger = logging.getLogger(__name__)

DECISION_STATUSES = (CaseStatus.APPROVED, CaseStatus.REJECTED)

def build_decision_email(case: Case, from_email: str) -> Optional[Dict[str, Any]]:
    """Resend payload telling the client about the decision, or None when there is nobody to tell"""
    recipient = case.client_info.email
    if case.status not in DECISION_STATUSES or not recipient:
        return None

    decision = case.status.value
    body = (
        f"Dear {case.client_info.client_name},\n\n"
        f"Your case #{case.case_id} has been {decision}."
    )
    return {
        "from": from_email,
        "to": [recipient],
        "subject": f"Your case #{case.case_id} has been {decision}",
        "html": f"<p>{body.replace(chr(10), '<br>')}</p>",
        "text": body,
    }

class DecisionNotifier:
    """
    CaseStore subscriber that emails the client when its case is decided.

    A failed delivery is logged and counted; the decision itself stands.
    """

    def __init__(self, from_email: str, sender=None):
        self.from_email = from_email
        self.sender = sender or resend.Emails.send
        self.sent_count = 0
        self.failed_count = 0

    def __call__(self, event: CaseEvent) -> None:
        if event.name != "status_changed" or event.case.status not in DECISION_STATUSES:
            return

        email_data = build_decision_email(event.case, self.from_email)
        if email_data is None:
            logger.info(f"Case {event.case.case_id} decided without client email - no notification sent")
            return

        try:
            result = self.sender(email_data)
        except Exception as e:
            self.failed_count += 1
            logger.error(f"Decision email for case {event.case.case_id} failed: {e}")
            return

        # Extract just the ID string from the Resend response
        if hasattr(result, 'id'):
            resend_id = result.id
        elif isinstance(result, dict) and 'id' in result:
            resend_id = result['id']
        else:
            resend_id = None

        self.sent_count += 1
        logger.info(f"Decision email sent via Resend - ID: {resend_id}, Case: {event.case.case_id}")
