"""Publish and unpublish generated websites on the hosting provider.

Publishing runs in three steps, each leaving the local record consistent:

1. **Site**: create the host site once and store its id right away, so a
   later failure reuses it instead of creating another one.
2. **Deploy**: announce ``/index.html`` by sha1; the body is uploaded only
   when the host says it does not already have that hash.
3. **Record**: only after the deploy succeeds does the website flip to
   ``published`` with its URL. A deploy failure leaves it ``draft``.

Unpublishing always clears the local publishing fields, even when the host
delete fails; the failure is logged and returned in the result.
"""

from __future__ import annotations

import hashlib
import logging
import re
import time
from datetime import datetime, timezone

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from negosyo.config import settings
from negosyo.core.async_tasks import notify
from negosyo.core.auth import ActingAs
from negosyo.core.exceptions import ConflictError, ConsistencyError, NotFoundError, ValidationError
from negosyo.core.locks import submission_locks
from negosyo.models.website import GeneratedWebsite
from negosyo.repositories import WebsiteRepository
from negosyo.services import email_service
from negosyo.services.hosting_service import HostingClient, HostingError, get_hosting_client
from negosyo.services.submission_service import (
    GENERATABLE_STATUSES,
    apply_transition,
    canonical_status,
    load_submission,
)

logger = logging.getLogger(__name__)

FALLBACK_SLUG = "business"
VALID_URL_RE = re.compile(r"^https://([a-z0-9-]+)\.netlify\.app$")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9]+")
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def derive_slug(name: str | None, max_length: int | None = None) -> str:
    """URL-safe subdomain from a business name.

    >>> derive_slug("Juan's Barbershop #1!")
    'juan-s-barbershop-1'
    """
    max_length = max_length or settings.netlify_site_name_max_length
    slug = _NON_ALNUM_RE.sub("-", (name or "").lower()).strip("-")
    slug = slug[:max_length].rstrip("-")
    return slug or FALLBACK_SLUG


def _base36(number: int) -> str:
    digits = ""
    while number:
        number, rem = divmod(number, 36)
        digits = _BASE36[rem] + digits
    return digits or "0"


def unique_slug(slug: str, max_length: int | None = None) -> str:
    """``slug`` with a time-based suffix, still within the host's length limit."""
    max_length = max_length or settings.netlify_site_name_max_length
    suffix = "-" + _base36(int(time.time() * 1000))
    base = slug[: max_length - len(suffix)].rstrip("-") or FALLBACK_SLUG
    return base + suffix


def _valid_url(url: str | None) -> bool:
    return bool(url) and VALID_URL_RE.match(url) is not None


def _url_for(site_name: str) -> str:
    return f"https://{site_name}.netlify.app"


async def _create_site(client: HostingClient, slug: str):
    try:
        return await client.create_site(slug)
    except HostingError as e:
        if not e.is_name_collision:
            raise
        retry_name = unique_slug(slug)
        logger.info("Site name '%s' is taken, retrying as '%s'", slug, retry_name)
        return await client.create_site(retry_name)


async def _resolve_site_name(client: HostingClient, website: GeneratedWebsite) -> str:
    """Site name for an existing site, trusting the host over a corrupted local URL."""
    match = VALID_URL_RE.match(website.published_url or "")
    if match:
        return match.group(1)
    site = await client.get_site(website.site_id)
    match = VALID_URL_RE.match(site.url)
    if match:
        return match.group(1)
    return site.name or website.site_name or FALLBACK_SLUG


async def _load_website(db: AsyncSession, submission_id: str) -> GeneratedWebsite:
    website = await WebsiteRepository(db).get_by_submission(submission_id)
    if website is None:
        raise NotFoundError("Website for submission", submission_id)
    return website


# ---------------------------------------------------------------------------
# Publish
# ---------------------------------------------------------------------------

async def publish(
    db: AsyncSession,
    acting_as: ActingAs,
    submission_id: str,
    client: HostingClient | None = None,
    *,
    notify_owner: bool = True,
) -> dict:
    """Deploy the website's HTML and record where it lives."""
    acting_as.require_admin()
    client = client or get_hosting_client()
    submission = await load_submission(db, submission_id)

    async with submission_locks.hold(submission_id):
        status = canonical_status(submission.status)
        if status not in GENERATABLE_STATUSES:
            raise ValidationError(f"Cannot publish a submission in status '{status}'")
        website = await _load_website(db, submission_id)
        if not website.html_content:
            raise ValidationError("Website has no rendered HTML; generate it first")
        html = website.html_content

        if not website.site_id:
            site = await _create_site(client, derive_slug(submission.business_name))
            website.site_id = site.id
            website.site_name = site.name
            await db.commit()
            logger.info("Submission %s now owns hosting site %s (%s)", submission_id, site.name, site.id)
            site_name = site.name
        else:
            site_name = await _resolve_site_name(client, website)

        site_id = website.site_id
        digest = hashlib.sha1(html.encode("utf-8")).hexdigest()
        deploy = await client.create_deploy(site_id, {"/index.html": digest})
        uploaded = digest in deploy.required
        if uploaded:
            await client.upload_file(deploy.id, "/index.html", html.encode("utf-8"))
        else:
            logger.info("Host already has %s for site %s; skipping upload", digest, site_id)

        published_url = website.published_url if _valid_url(website.published_url) else _url_for(site_name)
        now = datetime.now(timezone.utc)
        website.status = "published"
        website.site_name = site_name
        website.published_url = published_url
        website.published_at = now
        website.last_deploy_id = deploy.id
        submission.website_url = published_url
        try:
            await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error(
                "Deploy %s to site %s succeeded but recording it failed for submission %s: %s",
                deploy.id, site_id, submission_id, e,
            )
            raise ConsistencyError(
                f"Site {site_id} was deployed but the publish could not be recorded; publish again"
            ) from e

    logger.info("Published submission %s to %s (deploy %s)", submission_id, published_url, deploy.id)
    result = {
        "submission_id": submission_id,
        "published_url": published_url,
        "site_id": site_id,
        "site_name": site_name,
        "deploy_id": deploy.id,
        "uploaded": uploaded,
        "notification": "skipped",
    }
    if notify_owner and submission.owner_email:
        subject, body = email_service.website_live_email(
            owner_name=submission.owner_name,
            business_name=submission.business_name,
            url=published_url,
        )
        notify(email_service.send(submission.owner_email, subject, body), name=f"website_live_email:{submission_id}")
        result["notification"] = "scheduled"
    return result


# ---------------------------------------------------------------------------
# Unpublish
# ---------------------------------------------------------------------------

async def unpublish(
    db: AsyncSession,
    acting_as: ActingAs,
    submission_id: str,
    client: HostingClient | None = None,
) -> dict:
    """Delete the host site and clear the local publishing fields.

    A host delete that fails, or finds the site already gone, does not stop
    the local cleanup. ``website_generated`` submissions go back to
    ``approved``; paid submissions keep their status.
    """
    acting_as.require_admin()
    client = client or get_hosting_client()
    submission = await load_submission(db, submission_id)

    async with submission_locks.hold(submission_id):
        website = await _load_website(db, submission_id)
        site_id = website.site_id
        if not site_id:
            raise ValidationError("Website has no hosting site to unpublish")

        external = "deleted"
        try:
            if not await client.delete_site(site_id):
                external = "already_gone"
                logger.info("Hosting site %s was already gone", site_id)
        except HostingError as e:
            external = "failed"
            logger.warning("Could not delete hosting site %s, clearing local state anyway: %s", site_id, e.detail)

        website.status = "draft"
        website.site_id = None
        website.site_name = None
        website.published_url = None
        website.published_at = None
        website.last_deploy_id = None
        submission.website_url = None
        await db.commit()

        if canonical_status(submission.status) == "website_generated":
            try:
                await apply_transition(db, submission, "unpublish")
                await db.commit()
            except ConflictError as e:
                logger.warning(
                    "Site %s is gone but submission %s changed status meanwhile: %s",
                    site_id, submission_id, e.detail,
                )
                await db.refresh(submission)

    logger.info("Unpublished submission %s (site %s: %s)", submission_id, site_id, external)
    return {
        "submission_id": submission_id,
        "site_id": site_id,
        "external_delete": external,
        "submission_status": canonical_status(submission.status),
    }
