"""Suggested edits to brand and city page text.

Trusted users' edits go live straight away and are recorded as approved;
everyone else's wait in the pending queue until a moderator approves them.
Rejecting an edit that already went live puts the old value back.
"""

import logging
from dataclasses import dataclass
from datetime import UTC, datetime

from sqlalchemy.orm import Session

from vegan_aisle.errors import BadRequestError, ConflictError, NotFoundError
from vegan_aisle.models.brand import BrandContentEdit, BrandPage
from vegan_aisle.models.city import CityContentEdit, CityLandingPage
from vegan_aisle.models.enums import ProductStatus
from vegan_aisle.models.user import User
from vegan_aisle.services.trust import trust_level_for

logger = logging.getLogger(__name__)

ContentEdit = BrandContentEdit | CityContentEdit
ContentPage = BrandPage | CityLandingPage

EDIT_MODELS = {"brand": BrandContentEdit, "city": CityContentEdit}


@dataclass
class EditOutcome:
    """A recorded edit and whether it is already live."""

    edit: ContentEdit
    auto_applied: bool

    @property
    def message(self) -> str:
        if self.auto_applied:
            return "Edit applied successfully"
        return "Edit suggestion submitted for review"


def _page_of(edit: ContentEdit) -> ContentPage:
    if isinstance(edit, BrandContentEdit):
        return edit.brand_page
    return edit.city_page


def _apply(page: ContentPage, field: str, value: str, user_id: int) -> None:
    setattr(page, field, value)
    if isinstance(page, BrandPage):
        page.updated_by = user_id


def submit_edit(
    db: Session,
    page: ContentPage,
    edit: ContentEdit,
    user: User,
    field: str,
    suggested_value: str,
    reason: str | None = None,
) -> EditOutcome:
    """Record a suggested value for one field of a page.

    ``edit`` arrives with its page-specific columns filled in.
    """
    value = suggested_value.strip()
    if not value:
        raise BadRequestError("Suggested value is required", field="suggested_value")

    original = getattr(page, field) or ""
    if original == value:
        raise BadRequestError(
            "Suggested value is the same as the current value", field="suggested_value"
        )

    trust = trust_level_for(user)
    edit.field = field
    edit.original_value = original
    edit.suggested_value = value
    edit.reason = reason.strip() if reason and reason.strip() else None
    edit.user_id = user.id
    edit.trusted_contribution = trust.is_trusted

    if trust.is_trusted:
        _apply(page, field, value, user.id)
        edit.status = ProductStatus.APPROVED.value
        edit.auto_applied = True
        edit.needs_review = trust.needs_review
    else:
        edit.status = ProductStatus.PENDING.value
        edit.auto_applied = False
        edit.needs_review = True

    db.add(edit)
    db.commit()
    db.refresh(edit)
    logger.info(
        f"User {user.id} suggested {field} edit {edit.id} on {page.__tablename__} {page.id}"
        f" ({edit.status})"
    )
    return EditOutcome(edit=edit, auto_applied=trust.is_trusted)


def get_edit(db: Session, kind: str, edit_id: int) -> ContentEdit:
    model = EDIT_MODELS.get(kind)
    if model is None:
        raise BadRequestError(f"Unknown page type: {kind}")
    edit = db.query(model).filter(model.id == edit_id).first()
    if edit is None:
        raise NotFoundError("Edit not found")
    return edit


def list_pending_edits(db: Session, kind: str) -> list[ContentEdit]:
    model = EDIT_MODELS.get(kind)
    if model is None:
        raise BadRequestError(f"Unknown page type: {kind}")
    return (
        db.query(model)
        .filter(model.status == ProductStatus.PENDING.value)
        .order_by(model.created_at.asc(), model.id.asc())
        .all()
    )


def _mark_reviewed(
    edit: ContentEdit, status: ProductStatus, reviewer: User, note: str | None
) -> None:
    edit.status = status.value
    edit.needs_review = False
    edit.reviewed_by = reviewer.id
    edit.reviewed_at = datetime.now(UTC)
    if note:
        edit.review_note = note


def approve_edit(
    db: Session, edit: ContentEdit, reviewer: User, note: str | None = None
) -> ContentEdit:
    """Apply a pending edit to its page."""
    if edit.status != ProductStatus.PENDING.value:
        raise ConflictError("Edit has already been reviewed")
    _apply(_page_of(edit), edit.field, edit.suggested_value, edit.user_id)
    _mark_reviewed(edit, ProductStatus.APPROVED, reviewer, note)
    db.commit()
    db.refresh(edit)
    logger.info(f"Moderator {reviewer.id} approved {edit.__tablename__} {edit.id}")
    return edit


def reject_edit(
    db: Session, edit: ContentEdit, reviewer: User, note: str | None = None
) -> ContentEdit:
    """Reject an edit, reverting the page if the edit had gone live.

    The old value only comes back while the page still shows this edit's
    value, so a later edit to the same field is never clobbered.
    """
    if edit.status == ProductStatus.REJECTED.value:
        raise ConflictError("Edit has already been rejected")

    if edit.auto_applied and edit.status == ProductStatus.APPROVED.value:
        page = _page_of(edit)
        if (getattr(page, edit.field) or "") == edit.suggested_value:
            _apply(page, edit.field, edit.original_value or None, reviewer.id)

    _mark_reviewed(edit, ProductStatus.REJECTED, reviewer, note)
    db.commit()
    db.refresh(edit)
    logger.info(f"Moderator {reviewer.id} rejected {edit.__tablename__} {edit.id}")
    return edit
