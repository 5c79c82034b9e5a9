# Overview: Capability system package.
# Re-exports all public APIs.

from .categories import Capability, GRANULAR_CAPABILITIES
from .definitions import CAPABILITY_DEFINITIONS
from .roles import DEFAULT_ROLE_PERMISSIONS, FULL_PERMISSIONS, DEFAULT_MEMBER_PERMISSIONS
from .helpers import (
    get_all_capability_codes,
    get_capability_definition,
    validate_capability_code,
)

__all__ = [
    "Capability",
    "GRANULAR_CAPABILITIES",
    "CAPABILITY_DEFINITIONS",
    "DEFAULT_ROLE_PERMISSIONS",
    "FULL_PERMISSIONS",
    "DEFAULT_MEMBER_PERMISSIONS",
    "get_all_capability_codes",
    "get_capability_definition",
    "validate_capability_code",
]
