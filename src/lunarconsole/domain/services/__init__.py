"""Domain services for the LunarBase console.

Services contain the validation, normalization, caching and mutation logic.
They have no dependencies on the HTTP layer.
"""

from lunarconsole.domain.services.collection_validator import (
    RESERVED_COLLECTION_NAMES,
    RESERVED_FIELD_NAMES,
    CollectionValidationError,
    CollectionValidator,
)
from lunarconsole.domain.services.entity_cache import (
    CacheEntry,
    CacheKey,
    EntityCache,
    Resource,
    Stale,
)
from lunarconsole.domain.services.field_normalizer import (
    FileUpload,
    form_default,
    normalize_form,
    to_form,
    to_form_data,
    to_wire,
)
from lunarconsole.domain.services.field_validator import (
    FieldValidator,
    FieldValidatorCompiler,
    compile_field,
)
from lunarconsole.domain.services.mutation_executor import (
    MutationKind,
    MutationPlan,
    MutationResult,
    MutationState,
    MutationTarget,
    OptimisticMutationExecutor,
    PendingMutation,
)
from lunarconsole.domain.services.record_validator import (
    RecordValidator,
    compile_record_validator,
    validate_record,
)
from lunarconsole.domain.services.role_validator import RoleValidator
from lunarconsole.domain.services.setting_validator import (
    is_valid_setting_key,
    validate_setting_value,
)
from lunarconsole.domain.services.user_validator import PasswordPolicy, UserValidator

__all__ = [
    "CacheEntry",
    "CacheKey",
    "CollectionValidationError",
    "CollectionValidator",
    "EntityCache",
    "FieldValidator",
    "FieldValidatorCompiler",
    "FileUpload",
    "MutationKind",
    "MutationPlan",
    "MutationResult",
    "MutationState",
    "MutationTarget",
    "OptimisticMutationExecutor",
    "PasswordPolicy",
    "PendingMutation",
    "RESERVED_COLLECTION_NAMES",
    "RESERVED_FIELD_NAMES",
    "RecordValidator",
    "Resource",
    "RoleValidator",
    "Stale",
    "UserValidator",
    "compile_field",
    "compile_record_validator",
    "form_default",
    "is_valid_setting_key",
    "normalize_form",
    "to_form",
    "to_form_data",
    "to_wire",
    "validate_record",
    "validate_setting_value",
]
