"""LLM-facing tool implementations."""

from .animals import get_pet, search_pets
from .organizations import get_organization, search_organizations
from .animal_types import get_type, list_breeds, list_types
from . import validators

__all__ = [
    "search_pets",
    "get_pet",
    "search_organizations",
    "get_organization",
    "list_types",
    "get_type",
    "list_breeds",
    "validators",
]
