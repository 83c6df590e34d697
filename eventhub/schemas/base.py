"""Shared schema helpers."""

from typing import Any, Dict, Iterable, List

from pydantic import AnyHttpUrl, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ..services.errors import FieldError

# Leading location segments added by FastAPI that are not part of the field path
REQUEST_LOCATIONS = ('body', 'query', 'path', 'header')

_url_adapter = TypeAdapter(AnyHttpUrl)


def is_http_url(value: str) -> bool:
    """Whether ``value`` is an http(s) URL; a value without a scheme is read as http."""
    candidate = value if '://' in value else f'http://{value}'
    try:
        _url_adapter.validate_python(candidate)
    except PydanticValidationError:
        return False
    return True


def field_errors(errors: Iterable[Dict[str, Any]]) -> List[FieldError]:
    """Flatten pydantic error dicts into dotted-path field errors."""
    result = []
    for error in errors:
        if error.get('type') == 'json_invalid':
            result.append(FieldError('body', 'Invalid JSON body'))
            continue
        loc = [str(part) for part in error.get('loc', ())]
        if loc and loc[0] in REQUEST_LOCATIONS:
            loc = loc[1:]
        ctx_error = (error.get('ctx') or {}).get('error')
        message = str(ctx_error) if ctx_error is not None else error.get('msg', 'Invalid value')
        result.append(FieldError('.'.join(loc), message))
    return result
