"""Run tool arguments through their pydantic schema and report every violation at once."""

from dataclasses import dataclass, field
from typing import Any, Dict, Generic, List, Optional, Sequence, Tuple, Type, TypeVar, cast

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from recraft_mcp.errors import ValidationError
from recraft_mcp.styles import STYLES

M = TypeVar("M", bound=BaseModel)
R = TypeVar("R")

_ENUM_ERROR_TYPES = ("literal_error", "enum")


@dataclass
class ValidationResult(Generic[M]):
    """Either a normalized value or the aggregated message and issues explaining why not."""

    value: Optional[M] = None
    message: Optional[str] = None
    issues: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.message is None


def _issue_path(loc: Sequence[Any]) -> str:
    return ".".join(str(part) for part in loc)


def _to_issue(error: Dict[str, Any]) -> Dict[str, Any]:
    # Model level rules have no location of their own; they name one through ctx["field"].
    loc = error.get("loc") or ()
    if not loc and (error.get("ctx") or {}).get("field"):
        loc = (error["ctx"]["field"],)
    return {
        "path": _issue_path(loc),
        "message": error.get("msg", ""),
        "type": error.get("type", ""),
        "input": error.get("input"),
    }


def format_issue(issue: Dict[str, Any]) -> str:
    path = issue["path"]
    if "style" in path and issue["type"] in _ENUM_ERROR_TYPES:
        return 'Invalid style: "{}". Valid options are: {}'.format(
            issue["input"], ", ".join(STYLES)
        )
    return f"{path}: {issue['message']}" if path else issue["message"]


def format_validation_issues(error: PydanticValidationError) -> Tuple[str, List[Dict[str, Any]]]:
    """Render a pydantic error as ``"<path>: <message>"`` parts joined by ``"; "``."""
    errors = error.errors(include_url=False)
    issues = [_to_issue(e) for e in errors]
    message = "; ".join(format_issue(issue) for issue in issues)
    return message, issues


def check_schema(schema: Type[M], data: Any) -> ValidationResult[M]:
    try:
        return ValidationResult(value=schema.model_validate(data))
    except PydanticValidationError as e:
        message, issues = format_validation_issues(e)
        return ValidationResult(message=message, issues=issues)


def validate_schema(schema: Type[M], data: Any, error_prefix: str = "Validation error") -> M:
    result = check_schema(schema, data)
    if not result.ok:
        raise ValidationError(f"{error_prefix}: {result.message}", result.issues)
    return cast(M, result.value)


def validate_schema_as(
    schema: Type[BaseModel], data: Any, as_type: Type[R], error_prefix: str = "Validation error"
) -> R:
    """Same as :func:`validate_schema`, typed as ``as_type`` for callers relying on coercion."""
    return cast(R, validate_schema(schema, data, error_prefix))


def try_validate_schema(schema: Type[M], data: Any) -> Tuple[Optional[str], Optional[M]]:
    result = check_schema(schema, data)
    if not result.ok:
        return result.message, None
    return None, result.value
