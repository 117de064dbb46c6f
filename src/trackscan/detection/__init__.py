"""Tracking-call detection over JavaScript/TypeScript syntax trees."""

from .constants import ConstantResolver, DeclarationLookup, ImportBinding, ModuleLookup, ScopeIndex
from .context import enclosing_function_name
from .matcher import CallSiteMatcher, Match
from .properties import PropertyExtractor
from .providers import PROVIDERS, ProviderDescriptor, ProviderRegistry, default_registry
from .signatures import (
    CustomFunctionSignature,
    SignatureParameter,
    load_signatures,
    parse_signature,
    signature_from_mapping,
)

__all__ = [
    "CallSiteMatcher",
    "ConstantResolver",
    "CustomFunctionSignature",
    "DeclarationLookup",
    "ImportBinding",
    "Match",
    "ModuleLookup",
    "PROVIDERS",
    "PropertyExtractor",
    "ProviderDescriptor",
    "ProviderRegistry",
    "ScopeIndex",
    "SignatureParameter",
    "default_registry",
    "enclosing_function_name",
    "load_signatures",
    "parse_signature",
    "signature_from_mapping",
]
