"""Website rendering engine: template registry, themes, section variants and ``render``."""

from negosyo.sites.content import ContentSource, Legacy, Normalized, normalize
from negosyo.sites.injector import render
from negosyo.sites.registry import DEFAULT_TEMPLATE, get_template, list_templates, select_template

__all__ = [
    "ContentSource",
    "Legacy",
    "Normalized",
    "normalize",
    "render",
    "DEFAULT_TEMPLATE",
    "get_template",
    "list_templates",
    "select_template",
]
