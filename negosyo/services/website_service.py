"""Website generation, content editing and legacy content migration.

Generation is re-entrant: one ``GeneratedWebsite`` row per submission, updated
in place on every regeneration. While a generation runs the row carries a
``generating`` marker; a second call finding a fresh marker gets a
ConflictError, and a marker older than ``generation_stale_seconds`` is taken
over so a crashed or timed-out attempt never blocks the submission forever.
"""

from __future__ import annotations

import hashlib
import logging
from datetime import datetime, timedelta, timezone

from sqlalchemy import update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.config import settings
from negosyo.core.auth import ActingAs
from negosyo.core.exceptions import ConflictError, NotFoundError, ValidationError
from negosyo.core.locks import submission_locks
from negosyo.models._base import dump_json, load_json
from negosyo.models.submission import Submission
from negosyo.models.website import GeneratedWebsite, WebsiteContent
from negosyo.repositories import WebsiteRepository
from negosyo.schemas.content import (
    BusinessContent,
    ContactInfo,
    Customizations,
    WebsiteContentData,
    WebsiteContentPatch,
)
from negosyo.services.extraction_service import get_extraction_service
from negosyo.services.submission_service import (
    GENERATABLE_STATUSES,
    apply_transition,
    canonical_status,
    load_submission,
)
from negosyo.sites import DEFAULT_TEMPLATE, Legacy, get_template, normalize, render, select_template
from negosyo.sites.content import content_from_business

logger = logging.getLogger(__name__)

# WebsiteContent columns stored as JSON text.
_JSON_FIELDS = ("highlights", "services", "featured_items", "social_links", "navbar_links", "images", "visibility")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _aware(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; everything is stored in UTC.
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def content_hash(html: str) -> str:
    return hashlib.sha1(html.encode("utf-8")).hexdigest()


# ---------------------------------------------------------------------------
# WebsiteContent <-> WebsiteContentData
# ---------------------------------------------------------------------------

def _content_to_data(row: WebsiteContent) -> WebsiteContentData:
    data = {name: getattr(row, name) for name in WebsiteContentData.model_fields}
    for name in _JSON_FIELDS:
        data[name] = load_json(data[name], {} if name in ("images", "visibility") else [])
    data["contact"] = load_json(row.contact)
    data["business_name"] = row.business_name or ""
    return WebsiteContentData.model_validate(data)


def _data_to_columns(data: WebsiteContentData) -> dict:
    columns = data.model_dump()
    for name in _JSON_FIELDS:
        columns[name] = dump_json(columns[name])
    columns["contact"] = dump_json(columns["contact"]) if columns["contact"] is not None else None
    return columns


def _website_to_dict(website: GeneratedWebsite, content: WebsiteContentData | None = None) -> dict:
    def _ts(value: datetime | None) -> str | None:
        return value.isoformat() if value else None

    return {
        "id": website.id,
        "submission_id": website.submission_id,
        "template_name": website.template_name,
        "customizations": load_json(website.customizations, {}),
        "content_hash": website.content_hash,
        "has_html": bool(website.html_content),
        "status": website.status,
        "site_id": website.site_id,
        "site_name": website.site_name,
        "published_url": website.published_url,
        "published_at": _ts(website.published_at),
        "generation_status": website.generation_status,
        "content": content.model_dump() if content is not None else None,
        "created_at": _ts(website.created_at),
        "updated_at": _ts(website.updated_at),
    }


async def stored_content(db: AsyncSession, website: GeneratedWebsite) -> WebsiteContentData | None:
    """Normalized content for a website: its WebsiteContent row, else its legacy blob."""
    row = await WebsiteRepository(db).get_content(website.id)
    if row is not None:
        return _content_to_data(row)
    if website.content_blob:
        return normalize(Legacy(load_json(website.content_blob, {})))
    return None


def _submission_contact(submission: Submission) -> ContactInfo:
    address = ", ".join(part for part in (submission.address, submission.city) if part)
    return ContactInfo(
        phone=submission.owner_phone or None,
        email=submission.owner_email or None,
        address=address or None,
    )


async def _resolve_content(
    db: AsyncSession,
    submission: Submission,
    website: GeneratedWebsite | None,
    extraction,
) -> WebsiteContentData:
    if website is not None:
        existing = await stored_content(db, website)
        if existing is not None:
            return existing

    extracted = None
    if submission.extracted_content:
        extracted = BusinessContent.model_validate(load_json(submission.extracted_content, {}))
    elif submission.transcript:
        service = extraction or get_extraction_service()
        if service.configured:
            extracted = await service.extract_content(
                submission.transcript,
                business_name=submission.business_name,
                business_type=submission.business_type,
                city=submission.city,
            )
            submission.extracted_content = dump_json(extracted.model_dump())
        else:
            logger.warning("Submission %s has a transcript but extraction is not configured", submission.id)

    return content_from_business(
        business_name=submission.business_name,
        business_type=submission.business_type,
        city=submission.city,
        extracted=extracted,
        contact=_submission_contact(submission),
    )


def _coerce_customizations(value: Customizations | dict | None) -> Customizations | None:
    if value is None or isinstance(value, Customizations):
        return value
    return Customizations.model_validate(value)


# ---------------------------------------------------------------------------
# Generation marker
# ---------------------------------------------------------------------------

async def _claim_generation(db: AsyncSession, submission_id: str) -> tuple[GeneratedWebsite, bool]:
    """Mark the website row ``generating``, creating it if needed.

    Returns ``(website, created)``. Raises ConflictError while another
    generation holds a fresh marker.
    """
    repo = WebsiteRepository(db)
    now = _utcnow()
    website = await repo.get_by_submission(submission_id)
    if website is None:
        try:
            website = await repo.create(
                submission_id,
                template_name=DEFAULT_TEMPLATE,
                generation_status="generating",
                generation_started_at=now,
            )
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictError(f"Website for submission {submission_id} is being generated; retry shortly")
        return website, True

    started = _aware(website.generation_started_at)
    observed = website.generation_status
    if observed == "generating" and started is not None:
        if now - started < timedelta(seconds=settings.generation_stale_seconds):
            raise ConflictError(f"Website for submission {submission_id} is being generated; retry shortly")
        logger.warning("Taking over stale generation for submission %s (started %s)", submission_id, started)

    result = await db.execute(
        update(GeneratedWebsite)
        .where(GeneratedWebsite.id == website.id, GeneratedWebsite.generation_status == observed)
        .values(generation_status="generating", generation_started_at=now)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        await db.rollback()
        raise ConflictError(f"Website for submission {submission_id} is being generated; retry shortly")
    await db.commit()
    await db.refresh(website)
    return website, False


async def _release_generation(db: AsyncSession, website_id: str, created: bool) -> None:
    await db.rollback()
    website = await db.get(GeneratedWebsite, website_id)
    if website is None:
        return
    if created and not website.html_content:
        await db.delete(website)
    else:
        website.generation_status = "idle"
        website.generation_started_at = None
    await db.commit()


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------

async def generate_website(
    db: AsyncSession,
    acting_as: ActingAs,
    submission_id: str,
    *,
    template_name: str | None = None,
    customizations: Customizations | dict | None = None,
    content: WebsiteContentPatch | dict | None = None,
    extraction=None,
) -> dict:
    """Render and persist the website for a submission.

    Content comes from, in order: the website's stored content, the
    submission's extracted content, a fresh extraction of its transcript,
    then defaults built from the business fields. ``content`` is applied on
    top as a partial patch. An ``approved`` submission advances to
    ``website_generated``; later statuses are left as they are.
    """
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    status = canonical_status(submission.status)
    if status not in GENERATABLE_STATUSES:
        raise ValidationError(f"Cannot generate a website for a submission in status '{status}'")
    if template_name is not None:
        get_template(template_name)
    overrides = _coerce_customizations(customizations)
    patch = _coerce_patch(content)

    async with submission_locks.hold(submission_id):
        website, created = await _claim_generation(db, submission_id)
        website_id = website.id
        try:
            data = await _resolve_content(db, submission, None if created else website, extraction)
            if patch is not None:
                data = _apply_patch(data, patch)

            if template_name:
                chosen = template_name
            elif not created:
                chosen = website.template_name
            else:
                chosen = select_template(submission.business_type).name
            stored = Customizations() if created else Customizations.model_validate(
                load_json(website.customizations, {})
            )
            selection = stored.merged(overrides)
            html = render(chosen, data, selection, submission.photo_list)

            website.template_name = chosen
            website.customizations = dump_json(selection.model_dump(exclude_none=True))
            website.html_content = html
            website.content_hash = content_hash(html)
            website.generation_status = "idle"
            website.generation_started_at = None
            await WebsiteRepository(db).save_content(website.id, **_data_to_columns(data))

            if status == "approved":
                await apply_transition(db, submission, "website_generated")
            await db.commit()
        except Exception:
            await _release_generation(db, website_id, created)
            raise

    await db.refresh(website)
    logger.info(
        "Generated website for submission %s: template=%s hash=%s (%s)",
        submission_id, website.template_name, website.content_hash, "created" if created else "regenerated",
    )
    result = _website_to_dict(website, data)
    result["submission_status"] = canonical_status(submission.status)
    return result


def _coerce_patch(value: WebsiteContentPatch | dict | None) -> WebsiteContentPatch | None:
    if value is None or isinstance(value, WebsiteContentPatch):
        return value
    return WebsiteContentPatch.model_validate(value)


def _apply_patch(current: WebsiteContentData, patch: WebsiteContentPatch) -> WebsiteContentData:
    updates = patch.model_dump(exclude_unset=True)
    if updates.get("business_name") is None:
        updates.pop("business_name", None)
    return WebsiteContentData.model_validate({**current.model_dump(), **updates})


async def _load_website(db: AsyncSession, submission_id: str) -> GeneratedWebsite:
    website = await WebsiteRepository(db).get_by_submission(submission_id)
    if website is None:
        raise NotFoundError("Website for submission", submission_id)
    return website


async def save_website_content(
    db: AsyncSession,
    acting_as: ActingAs,
    submission_id: str,
    patch: WebsiteContentPatch | dict,
) -> dict:
    """Merge a partial content edit, persist it and re-render the HTML."""
    acting_as.require_admin()
    submission = await load_submission(db, submission_id)
    patch = _coerce_patch(patch)

    async with submission_locks.hold(submission_id):
        website = await _load_website(db, submission_id)
        started = _aware(website.generation_started_at)
        if (
            website.generation_status == "generating"
            and started is not None
            and _utcnow() - started < timedelta(seconds=settings.generation_stale_seconds)
        ):
            raise ConflictError(f"Website for submission {submission_id} is being generated; retry shortly")

        current = await stored_content(db, website) or content_from_business(
            business_name=submission.business_name,
            business_type=submission.business_type,
            city=submission.city,
            extracted=None,
            contact=_submission_contact(submission),
        )
        data = _apply_patch(current, patch)
        customizations = Customizations.model_validate(load_json(website.customizations, {}))
        html = render(website.template_name, data, customizations, submission.photo_list)

        await WebsiteRepository(db).save_content(website.id, **_data_to_columns(data))
        website.html_content = html
        website.content_hash = content_hash(html)
        await db.commit()
        await db.refresh(website)

    logger.info("Saved content for submission %s (hash=%s)", submission_id, website.content_hash)
    return _website_to_dict(website, data)


async def get_website(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> dict:
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    website = await _load_website(db, submission_id)
    return _website_to_dict(website, await stored_content(db, website))


async def get_preview_html(db: AsyncSession, acting_as: ActingAs, submission_id: str) -> str:
    submission = await load_submission(db, submission_id)
    acting_as.require_owner(submission.creator_id)
    website = await _load_website(db, submission_id)
    if not website.html_content:
        raise NotFoundError("Rendered website for submission", submission_id)
    return website.html_content


# ---------------------------------------------------------------------------
# Legacy content migration
# ---------------------------------------------------------------------------

async def migrate_legacy_content(db: AsyncSession, website: GeneratedWebsite) -> bool:
    """Create the WebsiteContent row for a legacy website from its blob.

    Runs once per website: returns False when the row already exists or there
    is no blob. The blob itself is kept for old readers.
    """
    repo = WebsiteRepository(db)
    if not website.content_blob or await repo.get_content(website.id) is not None:
        return False
    data = normalize(Legacy(load_json(website.content_blob, {})))
    await repo.save_content(website.id, **_data_to_columns(data))
    await db.commit()
    logger.info("Migrated legacy content for website %s", website.id)
    return True


async def migrate_all_legacy_content(db: AsyncSession, acting_as: ActingAs) -> dict:
    acting_as.require_admin()
    migrated, failed = [], []
    for website in await WebsiteRepository(db).list_unmigrated():
        website_id = website.id
        try:
            if await migrate_legacy_content(db, website):
                migrated.append(website_id)
        except (ValueError, TypeError) as e:
            await db.rollback()
            logger.warning("Could not migrate legacy content for website %s: %s", website_id, e)
            failed.append({"website_id": website_id, "detail": str(e)})
    return {"migrated": migrated, "failed": failed}
