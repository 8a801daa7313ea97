"""
Domain logic layer - Pure business logic
"""
from .field_types import (
    FieldType,
    FieldMapping,
    parse_options,
    map_field_type,
)
from .sample_data import (
    synthesize,
    build_sample_records,
)
from .schema_generator import (
    generate_schema,
    parse_generated_schema,
)
from .provisioner import (
    BaseProvisioner,
    ProvisioningPolicy,
)

__all__ = [
    # Field types
    "FieldType",
    "FieldMapping",
    "parse_options",
    "map_field_type",
    # Sample data
    "synthesize",
    "build_sample_records",
    # Schema
    "generate_schema",
    "parse_generated_schema",
    # Provisioning
    "BaseProvisioner",
    "ProvisioningPolicy",
]
