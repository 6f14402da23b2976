"""All-or-nothing payload validation on top of pydantic schemas."""

from typing import Any, Dict, Iterable, List, Type, TypeVar

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from components.core.exceptions import ValidationError

ModelT = TypeVar("ModelT", bound=BaseModel)

# Request parts FastAPI prefixes onto error locations
_LOCATION_PREFIXES = {"body", "query", "path", "header"}


def violations_from_errors(errors: Iterable[Dict[str, Any]]) -> List[Dict[str, str]]:
    """Flatten pydantic error dicts into ``{field, message}`` pairs."""
    violations = []
    for error in errors:
        loc = list(error.get("loc", ()))
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        field = ".".join(str(part) for part in loc) or "__root__"
        violations.append({"field": field, "message": error.get("msg", "Invalid value")})
    return violations


def validate_payload(schema: Type[ModelT], data: Any) -> ModelT:
    """Validate ``data`` against ``schema`` or raise with every violation."""
    try:
        return schema.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(violations=violations_from_errors(exc.errors())) from exc
