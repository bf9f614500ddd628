"""
Cases service - the CaseStore aggregate root

CaseStore owns every case and composes the document requirement resolver,
the comment thread, the lifecycle state machine and the role access
policy. Cases are immutable values: each mutation builds a new record and
swaps it in only after every check has passed, so a failed operation
leaves the stored case exactly as it was.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from case_review.config.role_permissions import SYSTEM_LABEL, parse_role, team_label_for
from case_review.exceptions import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from case_review.models.case import Case, CasePermissions, ChangeRequest, ChangeRequestInput, ClientInfo
from case_review.models.comment import Comment, CommentCreateRequest
from case_review.models.document import Document, DocumentInput
from case_review.models.enums import CaseAction, CaseStatus, CommentTarget, Role
from case_review.services.access_policy import RoleAccessPolicy
from case_review.services.case_lifecycle import CaseLifecycle
from case_review.services.document_requirements import (
    DocumentRequirements,
    apply_requirements,
    instantiate_missing,
    missing_uploads,
    resolve_required_documents,
)
from case_review.utils.helpers import is_blank, new_identifier, utc_now

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

@dataclass(frozen=True)
class CaseEvent:
    """Post-mutation notification handed to subscribers"""
    name: str
    case: Case
    role: Optional[Role] = None
    previous_status: Optional[CaseStatus] = None

CaseListener = Callable[[CaseEvent], None]

def _coerce(model_cls: Type[ModelT], value: Any, field: str) -> ModelT:
    """Accept a model instance or a mapping; surface pydantic failures as ValidationError"""
    if isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(value)
    except PydanticValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error.get("loc", ()))
        path = f"{field}.{location}" if location else field
        raise ValidationError(f"{path}: {error.get('msg', 'invalid value')}", field=path) from e

def _coerce_role(role: Any) -> Role:
    parsed = parse_role(role)
    if parsed is None:
        raise ValidationError(f"Unknown role: {role}", field="role")
    return parsed

class CaseStore:
    """In-memory store of cases, keyed by case id in creation order"""

    def __init__(
        self,
        enforce_required_documents: bool = False,
        clock: Callable[[], datetime] = utc_now,
        lifecycle: Optional[CaseLifecycle] = None,
        policy: Optional[RoleAccessPolicy] = None,
    ):
        self.enforce_required_documents = enforce_required_documents
        self.lifecycle = lifecycle or CaseLifecycle()
        self.policy = policy or RoleAccessPolicy()
        self._clock = clock
        self._cases: Dict[str, Case] = {}
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self._listeners: List[CaseListener] = []

    # Subscriptions

    def subscribe(self, listener: CaseListener) -> Callable[[], None]:
        """
        Register a callable invoked after every successful mutation

        Returns:
            A function that removes the listener again
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _emit(self, event: CaseEvent) -> None:
        # Runs after commit; a listener failure never fails the mutation
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception(f"Listener {listener!r} failed on {event.name} for case {event.case.case_id}")

    # Internals

    def _require(self, case_id: str) -> Case:
        case = self._cases.get(case_id)
        if case is None:
            raise NotFoundError("Case", case_id)
        return case

    def _lock_for(self, case_id: str) -> threading.Lock:
        with self._registry_lock:
            self._require(case_id)
            return self._locks.setdefault(case_id, threading.Lock())

    @contextmanager
    def _locked(self, case_id: str, expected_version: Optional[int]) -> Iterator[Case]:
        """Hold the case's lock and yield its current record after the version check"""
        with self._lock_for(case_id):
            case = self._require(case_id)
            if expected_version is not None and expected_version != case.version:
                raise ConflictError(case_id, expected_version, case.version)
            yield case

    def _now_for(self, case: Case) -> datetime:
        # updated_at never moves backwards, even if the clock does
        return max(self._clock(), case.updated_at)

    def _commit(self, updated: Case) -> Case:
        updated = updated.model_copy(update={"version": updated.version + 1})
        self._cases[updated.case_id] = updated
        return updated

    # Creation and queries

    def create_case(
        self,
        client_info: Any,
        change_requests: Iterable[Any],
        documents: Iterable[Any] = (),
    ) -> Case:
        """
        Submit a new case

        Args:
            client_info: ClientInfo or mapping with the client's details
            change_requests: ChangeRequestInput items or mappings (at least one)
            documents: DocumentInput items or mappings supplied with the submission

        Returns:
            The created case, status pending and assigned to "System"

        Raises:
            ValidationError: malformed client info, change requests or documents
        """
        info = _coerce(ClientInfo, client_info, "client_info")
        request_inputs = [
            _coerce(ChangeRequestInput, request, f"change_requests.{index}")
            for index, request in enumerate(change_requests)
        ]
        if not request_inputs:
            raise ValidationError("At least one change request is required", field="change_requests")

        requests = tuple(
            ChangeRequest(
                change_request_id=request.change_request_id or new_identifier(),
                hdi_number=request.hdi_number,
                country=request.country,
                type_of_change=request.type_of_change,
            )
            for request in request_inputs
        )
        if len({request.change_request_id for request in requests}) != len(requests):
            raise ValidationError("Change request identifiers must be unique", field="change_requests")

        document_inputs = [
            _coerce(DocumentInput, document, f"documents.{index}")
            for index, document in enumerate(documents)
        ]
        docs = tuple(
            Document(
                document_id=document.document_id or new_identifier(),
                name=document.name,
                uploaded=document.uploaded or document.file_handle is not None,
                file_handle=document.file_handle,
            )
            for document in document_inputs
        )
        if len({document.document_id for document in docs}) != len(docs):
            raise ValidationError("Document identifiers must be unique", field="documents")

        requirements = resolve_required_documents(requests)
        docs = instantiate_missing(apply_requirements(docs, requirements), requirements)

        now = self._clock()
        case = Case(
            case_id=new_identifier(),
            client_info=info,
            change_requests=requests,
            documents=docs,
            status=CaseStatus.PENDING,
            current_assignee=SYSTEM_LABEL,
            submitted_at=now,
            updated_at=now,
        )
        with self._registry_lock:
            self._cases[case.case_id] = case

        logger.info(
            f"Created case {case.case_id} for client {info.client_name} "
            f"({len(requests)} change requests, {len(requirements.names)} required documents)"
        )
        self._emit(CaseEvent(name="case_created", case=case))
        return case

    def get_case(self, case_id: str) -> Case:
        return self._require(case_id)

    def list_cases(self) -> List[Case]:
        """All cases in creation order"""
        return list(self._cases.values())

    def cases_by_status(self, status: CaseStatus) -> List[Case]:
        status = CaseStatus(status)
        return [case for case in self._cases.values() if case.status == status]

    def visible_cases(self, role: Any, client_key: Optional[str] = None) -> List[Case]:
        return self.policy.visible_cases(_coerce_role(role), self.list_cases(), client_key)

    def permissions(self, case_id: str, role: Any) -> CasePermissions:
        return self.policy.permissions(_coerce_role(role), self._require(case_id))

    def required_document_names(self, case_id: str) -> DocumentRequirements:
        return resolve_required_documents(self._require(case_id).change_requests)

    def missing_required_documents(self, case_id: str) -> List[Document]:
        return missing_uploads(self._require(case_id).documents)

    def comments_for(
        self,
        case_id: str,
        target: CommentTarget,
        target_id: Optional[str] = None,
    ) -> List[Comment]:
        case = self._require(case_id)
        target = CommentTarget(target)
        if target == CommentTarget.CHANGE_REQUEST and target_id not in case.change_request_ids:
            raise NotFoundError("Change request", str(target_id))
        return case.comments.query(target, target_id)

    # Lifecycle

    def assign_intake(self, case_id: str, expected_version: Optional[int] = None) -> Case:
        """System-owned pending -> with-okw transition performed after submission"""
        with self._locked(case_id, expected_version) as case:
            previous = case.status
            moved = self.lifecycle.apply(case, CaseStatus.WITH_OKW, None, self._now_for(case))
            updated = self._commit(moved)

        logger.info(f"Case {case_id} assigned to {updated.current_assignee} at intake")
        self._emit(CaseEvent(name="status_changed", case=updated, previous_status=previous))
        return updated

    def update_status(
        self,
        case_id: str,
        target_status: CaseStatus,
        acting_label: Optional[str],
        role: Any,
        expected_version: Optional[int] = None,
    ) -> Case:
        """
        Move a case to `target_status` on behalf of `role`

        Args:
            case_id: Case to move
            target_status: Requested status
            acting_label: New assignee label; None picks the target's default team
            role: Acting role
            expected_version: Optional optimistic concurrency check

        Raises:
            NotFoundError: unknown case
            InvalidTransitionError: change not in the lifecycle table
            PermissionDeniedError: role lacks the permission for this transition
            ValidationError: required documents missing while enforcement is on
            ConflictError: case version differs from expected_version
        """
        role = _coerce_role(role)
        target_status = CaseStatus(target_status)

        with self._locked(case_id, expected_version) as case:
            action = self.lifecycle.action_for(case.status, target_status)
            if action == CaseAction.INTAKE:
                raise PermissionDeniedError(
                    f"Intake assignment of case {case_id} is performed by the system, not by role '{role.value}'"
                )
            self.policy.require_action(role, case, action)

            if action == CaseAction.MOVE_FORWARD and self.enforce_required_documents:
                missing = missing_uploads(case.documents)
                if missing:
                    names = ", ".join(document.name for document in missing)
                    raise ValidationError(
                        f"All required documents must be uploaded before review: {names}",
                        field="documents",
                    )

            previous = case.status
            moved = self.lifecycle.apply(case, target_status, acting_label, self._now_for(case))
            updated = self._commit(moved)

        logger.info(
            f"Case {case_id} moved {previous.value} -> {updated.status.value} "
            f"by {role.value}, assigned to {updated.current_assignee}"
        )
        self._emit(CaseEvent(name="status_changed", case=updated, role=role, previous_status=previous))
        return updated

    # Comments

    def add_comment(
        self,
        case_id: str,
        comment: Any,
        role: Any,
        expected_version: Optional[int] = None,
    ) -> Case:
        """
        Append a comment; the new comment is the last entry of the returned case's thread

        Raises:
            PermissionDeniedError: role is not the assigned team
            ValidationError: blank text or bad change-request reference
        """
        role = _coerce_role(role)
        request = _coerce(CommentCreateRequest, comment, "comment")
        if expected_version is None:
            expected_version = request.expected_version

        with self._locked(case_id, expected_version) as case:
            self.policy.require_assigned(role, case, "comment")
            author = request.author.strip() if not is_blank(request.author) else team_label_for(role)
            now = self._now_for(case)
            thread, created = case.comments.add(request, author, case.change_request_ids, now)
            updated = self._commit(case.model_copy(update={"comments": thread, "updated_at": now}))

        logger.info(f"Comment {created.comment_id} added to case {case_id} ({created.target.value}) by {role.value}")
        self._emit(CaseEvent(name="comment_added", case=updated, role=role))
        return updated

    # Attachments

    def add_attachment(
        self,
        case_id: str,
        name: str,
        role: Any,
        expected_version: Optional[int] = None,
    ) -> Case:
        """Add an awaiting, non-required document slot; it is the last document of the returned case"""
        role = _coerce_role(role)
        if is_blank(name):
            raise ValidationError("Attachment name cannot be empty", field="name")

        with self._locked(case_id, expected_version) as case:
            self.policy.require_assigned(role, case, "add attachments")
            document = Document(
                document_id=new_identifier(),
                name=name.strip(),
                required=False,
                uploaded=False,
                awaiting=True,
            )
            updated = self._commit(case.model_copy(update={
                "documents": case.documents + (document,),
                "updated_at": self._now_for(case),
            }))

        logger.info(f"Attachment slot '{document.name}' ({document.document_id}) added to case {case_id}")
        self._emit(CaseEvent(name="attachment_added", case=updated, role=role))
        return updated

    def remove_attachment(
        self,
        case_id: str,
        document_id: str,
        role: Any,
        expected_version: Optional[int] = None,
    ) -> Case:
        """Delete a non-required document, or reset a required one to not uploaded"""
        role = _coerce_role(role)

        with self._locked(case_id, expected_version) as case:
            self.policy.require_assigned(role, case, "remove attachments")
            target = case.find_document(document_id)
            if target is None:
                raise NotFoundError("Document", document_id)

            if target.required:
                documents = tuple(
                    document.model_copy(update={"uploaded": False, "file_handle": None})
                    if document.document_id == document_id else document
                    for document in case.documents
                )
            else:
                documents = tuple(
                    document for document in case.documents if document.document_id != document_id
                )
            updated = self._commit(case.model_copy(update={
                "documents": documents,
                "updated_at": self._now_for(case),
            }))

        action = "reset" if target.required else "removed"
        logger.info(f"Document {document_id} ({target.name}) {action} on case {case_id}")
        self._emit(CaseEvent(name="attachment_removed", case=updated, role=role))
        return updated

    def upload_attachment(
        self,
        case_id: str,
        document_id: str,
        file_handle: Any,
        role: Any,
        expected_version: Optional[int] = None,
    ) -> Case:
        """Bind an opaque file handle to a document; the file itself is never read"""
        role = _coerce_role(role)
        if file_handle is None or (isinstance(file_handle, str) and is_blank(file_handle)):
            raise ValidationError("file_handle is required", field="file_handle")

        with self._locked(case_id, expected_version) as case:
            self.policy.require_assigned(role, case, "upload attachments")
            target = case.find_document(document_id)
            if target is None:
                raise NotFoundError("Document", document_id)

            documents = tuple(
                document.model_copy(update={"uploaded": True, "awaiting": False, "file_handle": file_handle})
                if document.document_id == document_id else document
                for document in case.documents
            )
            updated = self._commit(case.model_copy(update={
                "documents": documents,
                "updated_at": self._now_for(case),
            }))

        logger.info(f"File bound to document {document_id} ({target.name}) on case {case_id}")
        self._emit(CaseEvent(name="attachment_uploaded", case=updated, role=role))
        return updated
