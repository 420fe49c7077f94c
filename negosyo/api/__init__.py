"""API router registry used by the app factory.

This keeps route module imports and inclusion order in one place so
`negosyo.main` stays focused on startup wiring.
"""

from __future__ import annotations

from fastapi import APIRouter

from . import admin, creators, health, submissions, uploads, websites

API_PREFIX = "/api/v1"

API_ROUTERS: tuple[APIRouter, ...] = (
    health.router,
    creators.router,
    submissions.router,
    admin.router,
    websites.router,
    uploads.router,
)

__all__ = ["API_PREFIX", "API_ROUTERS"]
