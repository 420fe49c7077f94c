"""Generated websites and their normalized, independently editable content."""
import uuid

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Index, String, Text

from negosyo.database import Base
from negosyo.models._base import utcnow


class GeneratedWebsite(Base):
    """Rendered site for one submission.

    ``content_blob`` holds the legacy unstructured content for records created
    before ``WebsiteContent`` existed; new records leave it empty.
    """
    __tablename__ = "generated_websites"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    submission_id = Column(String(36), ForeignKey("submissions.id"), unique=True, nullable=False)
    template_name = Column(String(50), nullable=False)
    html_content = Column(Text, nullable=True)
    customizations = Column(Text, nullable=False, default="{}")
    content_blob = Column(Text, nullable=True)
    content_hash = Column(String(40), nullable=True)  # sha1 of html_content

    # Publishing
    status = Column(String(20), nullable=False, default="draft")  # draft, published
    site_id = Column(String(100), nullable=True)
    site_name = Column(String(100), nullable=True)
    published_url = Column(String(500), nullable=True)
    published_at = Column(DateTime(timezone=True), nullable=True)
    last_deploy_id = Column(String(100), nullable=True)

    # Generation marker for the staleness timeout
    generation_status = Column(String(20), nullable=False, default="idle")  # idle, generating
    generation_started_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    __table_args__ = (
        CheckConstraint(
            "status != 'published' OR (published_url IS NOT NULL AND published_url != '' "
            "AND site_id IS NOT NULL AND site_id != '')",
            name="ck_website_published_has_site",
        ),
        Index("idx_website_status", "status"),
    )


class WebsiteContent(Base):
    """Normalized content feeding the renderer. Lists and maps are JSON text."""
    __tablename__ = "website_contents"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    website_id = Column(String(36), ForeignKey("generated_websites.id"), unique=True, nullable=False)

    business_name = Column(String(200), nullable=False, default="")
    business_type = Column(String(100), nullable=True)
    tagline = Column(Text, nullable=True)
    about = Column(Text, nullable=True)

    hero_headline = Column(Text, nullable=True)
    hero_subheadline = Column(Text, nullable=True)
    hero_badge = Column(String(200), nullable=True)
    hero_cta_label = Column(String(100), nullable=True)
    hero_cta_link = Column(String(500), nullable=True)
    hero_testimonial = Column(Text, nullable=True)

    about_headline = Column(Text, nullable=True)
    highlights = Column(Text, nullable=False, default="[]")

    services_headline = Column(Text, nullable=True)
    services_subheadline = Column(Text, nullable=True)
    services = Column(Text, nullable=False, default="[]")

    featured_headline = Column(Text, nullable=True)
    featured_subheadline = Column(Text, nullable=True)
    featured_items = Column(Text, nullable=False, default="[]")

    contact = Column(Text, nullable=True)
    footer_description = Column(Text, nullable=True)
    social_links = Column(Text, nullable=False, default="[]")
    navbar_links = Column(Text, nullable=False, default="[]")
    images = Column(Text, nullable=False, default="{}")
    visibility = Column(Text, nullable=False, default="{}")

    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)
