"""Field-mapping module exports."""

from archsync.mapping.defaults import BUILTIN_RULE_SET_ID, builtin_rule_set
from archsync.mapping.resolver import MappingResolver
from archsync.mapping.store import CatalogMappingStore, load_mapping_catalog
from archsync.mapping.transformer import FieldTransformer

__all__ = [
    "BUILTIN_RULE_SET_ID",
    "CatalogMappingStore",
    "FieldTransformer",
    "MappingResolver",
    "builtin_rule_set",
    "load_mapping_catalog",
]
