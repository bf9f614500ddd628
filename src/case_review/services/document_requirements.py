"""
Document requirement resolution - which documents a case needs, derived from its change requests
"""

from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterable, List, Tuple

from case_review.models.case import ChangeRequest
from case_review.models.document import Document
from case_review.models.enums import ChangeType
from case_review.utils.helpers import new_identifier

# Static requirement table; "Other" requires nothing on its own
REQUIRED_DOCUMENTS_BY_CHANGE_TYPE: Dict[ChangeType, Tuple[str, ...]] = {
    ChangeType.ADDRESS_UPDATE: ("Proof of Address",),
    ChangeType.ENTITY_TYPE_CHANGE: ("Certificate of Incorporation", "Board Resolution"),
    ChangeType.NAME_CHANGE: ("Certificate of Name Change", "Board Resolution"),
    ChangeType.CONTACT_INFORMATION: ("Proof of Identity",),
    ChangeType.OTHER: (),
}

# Standard documents offered on the submission form
STANDARD_DOCUMENT_NAMES: Tuple[str, ...] = (
    "Proof of Address",
    "Certificate of Incorporation",
    "Board Resolution",
    "Certificate of Name Change",
    "Proof of Identity",
)

@dataclass(frozen=True)
class DocumentRequirements:
    names: FrozenSet[str]

    @property
    def any_documents_required(self) -> bool:
        return bool(self.names)

    def sorted_names(self) -> List[str]:
        return sorted(self.names)

def resolve_required_documents(change_requests: Iterable[ChangeRequest]) -> DocumentRequirements:
    """Union of the per-type document lists across all change requests"""
    names = set()
    for request in change_requests:
        names.update(REQUIRED_DOCUMENTS_BY_CHANGE_TYPE.get(ChangeType(request.type_of_change), ()))
    return DocumentRequirements(names=frozenset(names))

def apply_requirements(
    documents: Iterable[Document],
    requirements: DocumentRequirements,
) -> Tuple[Document, ...]:
    """
    Retag documents' `required` flag by name membership.

    Records are never created here; the result has exactly the input
    documents, in order, with only `required` changed where needed.
    """
    retagged = []
    for document in documents:
        required = document.name in requirements.names
        if document.required != required:
            document = document.model_copy(update={"required": required})
        retagged.append(document)
    return tuple(retagged)

def instantiate_missing(
    documents: Tuple[Document, ...],
    requirements: DocumentRequirements,
) -> Tuple[Document, ...]:
    """Append a not-uploaded slot for each required name without a document record"""
    present = {document.name for document in documents}
    missing = [name for name in requirements.sorted_names() if name not in present]
    return documents + tuple(
        Document(document_id=new_identifier(), name=name, required=True)
        for name in missing
    )

def missing_uploads(documents: Iterable[Document]) -> List[Document]:
    """Required documents that have no file yet"""
    return [document for document in documents if document.required and not document.uploaded]
