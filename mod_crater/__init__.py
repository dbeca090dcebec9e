"""mod-crater: find mods broken by deprecated or missing dependencies."""

__version__ = "0.1.0"

from mod_crater.classifier import PassSnapshot, classify
from mod_crater.dependency_parser import parse_dependencies, parse_dependency
from mod_crater.exceptions import CatalogError, CraterError, InvalidInputError, PortalError
from mod_crater.filters import broken_before, numeric_version_key
from mod_crater.models import (
    BrokenMod,
    ClassificationResult,
    DependencyDescriptor,
    DependencyRelation,
    ModRecord,
    Status,
    TypoMod,
)

__all__ = [
    "BrokenMod",
    "CatalogError",
    "ClassificationResult",
    "CraterError",
    "DependencyDescriptor",
    "DependencyRelation",
    "InvalidInputError",
    "ModRecord",
    "PassSnapshot",
    "PortalError",
    "Status",
    "TypoMod",
    "broken_before",
    "classify",
    "numeric_version_key",
    "parse_dependencies",
    "parse_dependency",
]
