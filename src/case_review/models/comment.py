"""
Comment models and the per-case comment thread
"""

from datetime import datetime
from typing import Iterable, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, RootModel

from case_review.exceptions import ValidationError
from case_review.models.enums import CommentTarget
from case_review.utils.helpers import is_blank, new_identifier

class Comment(BaseModel):
    """Immutable audit entry attached to the client info or to one change request"""
    model_config = ConfigDict(frozen=True)

    comment_id: str
    text: str
    author: str
    timestamp: datetime
    target: CommentTarget
    target_id: Optional[str] = None

class CommentCreateRequest(BaseModel):
    text: str = ""
    target: CommentTarget = CommentTarget.CLIENT_INFO
    target_id: Optional[str] = None
    author: Optional[str] = Field(None, description="Defaults to the acting role's team label")
    expected_version: Optional[int] = Field(None, ge=1, description="Optimistic concurrency check")

class CommentThread(RootModel[Tuple[Comment, ...]]):
    """
    Append-only collection of a case's comments.

    The thread is an immutable value: `add` returns a new thread holding
    the extra comment and leaves the receiver untouched. There is no
    update or delete.
    """
    model_config = ConfigDict(frozen=True)

    root: Tuple[Comment, ...] = ()

    def __iter__(self) -> Iterator[Comment]:
        return iter(self.root)

    def __len__(self) -> int:
        return len(self.root)

    def add(
        self,
        request: CommentCreateRequest,
        author: str,
        change_request_ids: Iterable[str],
        now: datetime,
    ) -> Tuple["CommentThread", Comment]:
        """
        Append a comment with a fresh identifier and the given timestamp

        Args:
            request: Text and target of the new comment
            author: Label recorded as the comment's author
            change_request_ids: Identifiers of the owning case's change requests
            now: Timestamp for the comment

        Returns:
            Tuple of (new thread, created comment)

        Raises:
            ValidationError: blank text, or a change-request target that is
                missing or unknown on the owning case
        """
        if is_blank(request.text):
            raise ValidationError("Comment text cannot be empty", field="text")

        target_id = None
        if request.target == CommentTarget.CHANGE_REQUEST:
            if is_blank(request.target_id):
                raise ValidationError(
                    "target_id is required when commenting on a change request",
                    field="target_id",
                )
            if request.target_id not in set(change_request_ids):
                raise ValidationError(
                    f"Change request {request.target_id} does not belong to this case",
                    field="target_id",
                )
            target_id = request.target_id

        comment = Comment(
            comment_id=new_identifier(),
            text=request.text.strip(),
            author=author,
            timestamp=now,
            target=request.target,
            target_id=target_id,
        )
        return CommentThread(self.root + (comment,)), comment

    def query(self, target: CommentTarget, target_id: Optional[str] = None) -> List[Comment]:
        """Comments for one target in insertion order; client-info comments share one thread"""
        target = CommentTarget(target)
        if target == CommentTarget.CLIENT_INFO:
            return [c for c in self.root if c.target == target]
        return [c for c in self.root if c.target == target and c.target_id == target_id]
