from negosyo.models.creator import Creator
from negosyo.models.payout import PayoutLedgerEntry
from negosyo.models.submission import Submission
from negosyo.models.website import GeneratedWebsite, WebsiteContent

__all__ = [
    "Creator",
    "Submission",
    "GeneratedWebsite",
    "WebsiteContent",
    "PayoutLedgerEntry",
]
