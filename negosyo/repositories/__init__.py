from negosyo.repositories.creator_repo import CreatorRepository
from negosyo.repositories.submission_repo import SubmissionRepository
from negosyo.repositories.website_repo import WebsiteRepository

__all__ = ["CreatorRepository", "SubmissionRepository", "WebsiteRepository"]
