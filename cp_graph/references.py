import logging
from typing import Any

from pydantic import ValidationError

from cp_graph.exceptions import MalformedReferenceError
from cp_graph.models import ResourceReference

logger = logging.getLogger(__name__)

SINGLE_REFERENCE_PATH = ("spec", "resourceRef")
MULTI_REFERENCE_PATH = ("spec", "resourceRefs")


def get_nested_field(obj: dict[str, Any], *fields: str) -> tuple[Any, bool]:
    """
    Look up a nested field.

    Returns:
        Tuple of (value, found); a field explicitly set to null counts as absent
    """
    current: Any = obj
    for field in fields:
        if not isinstance(current, dict) or field not in current:
            return None, False
        current = current[field]
    return current, current is not None


def _parse_reference(value: Any, field_path: str) -> ResourceReference:
    if not isinstance(value, dict):
        raise MalformedReferenceError(field_path, "expected a mapping", value)
    try:
        return ResourceReference.model_validate(value)
    except ValidationError as e:
        missing = [".".join(str(p) for p in err["loc"]) for err in e.errors()]
        raise MalformedReferenceError(
            field_path, f"invalid or missing keys: {', '.join(missing)}", value
        ) from e


def extract_references(obj: dict[str, Any]) -> list[ResourceReference]:
    """
    Extract the child references declared in an object's spec.

    ``spec.resourceRef`` (one child) takes precedence over
    ``spec.resourceRefs`` (a list of children). Order of the list is kept.

    Args:
        obj: Fetched object

    Returns:
        References in declaration order, empty for a leaf

    Raises:
        MalformedReferenceError: A reference field exists but has the wrong shape
    """
    single, found = get_nested_field(obj, *SINGLE_REFERENCE_PATH)
    if found:
        return [_parse_reference(single, ".".join(SINGLE_REFERENCE_PATH))]

    multi, found = get_nested_field(obj, *MULTI_REFERENCE_PATH)
    if not found:
        return []

    field_path = ".".join(MULTI_REFERENCE_PATH)
    if not isinstance(multi, list):
        raise MalformedReferenceError(field_path, "expected a list", multi)

    return [_parse_reference(item, f"{field_path}[{i}]") for i, item in enumerate(multi)]
