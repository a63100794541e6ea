"""
Declarative schema of the business-profile fields the intake pipeline understands

Each field carries its shape (single value or set-like sequence), the weight it
contributes to the completion score and the type extracted values are coerced to.
"""
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional
import logging

logger = logging.getLogger(__name__)


class FieldShape(str, Enum):
    """How a field stores values"""
    SCALAR = "scalar"
    SEQUENCE = "sequence"


@dataclass(frozen=True)
class FieldSpec:
    """One recognized profile field"""
    name: str
    shape: FieldShape
    weight: int = 0
    value_type: type = str
    extractable: bool = True

    @property
    def is_sequence(self) -> bool:
        return self.shape == FieldShape.SEQUENCE

    @property
    def is_scored(self) -> bool:
        return self.weight > 0


S = FieldShape.SCALAR
Q = FieldShape.SEQUENCE

PROFILE_FIELDS: List[FieldSpec] = [
    # Tier 1 - Basic Identity (30 points)
    FieldSpec("mobile_number", S, 5, extractable=False),
    FieldSpec("business_type", S, 10),
    FieldSpec("location_city", S, 8),
    FieldSpec("location_state", S, 7),

    # Tier 2 - Operational (35 points)
    FieldSpec("monthly_revenue", S, 8, value_type=int),
    FieldSpec("peak_hours", Q, 5),
    FieldSpec("peak_days", Q, 5),
    FieldSpec("top_products", Q, 7),
    FieldSpec("staff_count", S, 5, value_type=int),
    FieldSpec("inventory_source", S, 5),

    # Tier 3 - Tools & Platforms (20 points)
    FieldSpec("payment_methods", Q, 5),
    FieldSpec("ad_channels", Q, 5),
    FieldSpec("platforms_used", Q, 5),
    FieldSpec("past_campaigns", Q, 5),

    # Tier 4 - Strategy (15 points)
    FieldSpec("goals", Q, 8),
    FieldSpec("challenges", Q, 7),

    # Recognized but not scored
    FieldSpec("staff_roles", Q),
    FieldSpec("supplier_name", S),
    FieldSpec("pricing_model", S),
]

FIELDS_BY_NAME: Dict[str, FieldSpec] = {spec.name: spec for spec in PROFILE_FIELDS}

SEQUENCE_FIELDS: List[str] = [spec.name for spec in PROFILE_FIELDS if spec.is_sequence]
SCALAR_FIELDS: List[str] = [spec.name for spec in PROFILE_FIELDS if not spec.is_sequence]

TOTAL_WEIGHT: int = sum(spec.weight for spec in PROFILE_FIELDS)

INT64_MIN = -(2 ** 63)
INT64_MAX = 2 ** 63 - 1


def get_field(name: str) -> Optional[FieldSpec]:
    return FIELDS_BY_NAME.get(name)


def is_empty(value: Any) -> bool:
    """True for None, blank strings and empty sequences"""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def _coerce_scalar(value: Any, value_type: type) -> Any:
    """
    Coerce a single extracted value to *value_type*

    Raises:
        ValueError: If the value cannot be represented as *value_type*
    """
    if isinstance(value, (list, tuple, set, dict)):
        raise ValueError(f"expected a single value, got {type(value).__name__}")
    if value_type is int:
        if isinstance(value, bool):
            raise ValueError("boolean is not a number")
        if isinstance(value, (int, float)):
            number = int(value)
        else:
            # "80,000" / "₹ 80000" / "80000.0"
            cleaned = str(value).replace(",", "").replace("₹", "").strip()
            number = int(float(cleaned))
        # Integer columns are signed 64-bit
        if not INT64_MIN <= number <= INT64_MAX:
            raise ValueError(f"{number} does not fit in a 64-bit integer")
        return number
    if isinstance(value, str):
        return value.strip()
    return str(value)


def coerce_value(spec: FieldSpec, value: Any) -> Any:
    """
    Normalize an extracted value to the field's shape and type

    Sequences become de-duplicated lists (a lone value is wrapped), scalars are
    coerced to ``spec.value_type``. Empty results come back as ``None``.

    Raises:
        ValueError: If the value cannot be coerced
    """
    if spec.is_sequence:
        items = value if isinstance(value, (list, tuple)) else [value]
        coerced: List[Any] = []
        for item in items:
            if is_empty(item):
                continue
            item = _coerce_scalar(item, spec.value_type)
            if item not in coerced:
                coerced.append(item)
        return coerced or None

    if is_empty(value):
        return None
    return _coerce_scalar(value, spec.value_type)


def filter_extraction(raw: Any) -> Dict[str, Any]:
    """
    Keep only recognized, extractable, non-empty and well-typed fields

    Args:
        raw: Mapping produced by the extraction model (anything else yields {})

    Returns:
        Cleaned mapping of field name to coerced value
    """
    if not isinstance(raw, Mapping):
        if raw:
            logger.warning(f"Ignoring non-mapping extraction output: {type(raw).__name__}")
        return {}

    cleaned: Dict[str, Any] = {}
    for name, value in raw.items():
        spec = FIELDS_BY_NAME.get(name)
        if spec is None or not spec.extractable:
            logger.debug(f"Dropping unrecognized extracted field: {name}")
            continue
        try:
            coerced = coerce_value(spec, value)
        except (TypeError, ValueError, OverflowError) as e:
            logger.debug(f"Dropping {name}={value!r}: {e}")
            continue
        if coerced is not None:
            cleaned[name] = coerced
    return cleaned
