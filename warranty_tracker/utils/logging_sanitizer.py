"""
Logging Sanitizer Utility

Redacts credentials and masks customer contact data before request payloads
reach the logs.
"""

from typing import Any, Dict, Mapping


# Never logged, not even partially
SENSITIVE_FIELDS = {
    'password',
    'confirm_password',
    'current_password',
    'new_password',
    'secret',
    'secret_key',
    'token',
    'api_key',
    'csrf_token',
    'session_id',
}

# Customer data that is logged with everything but the tail masked
MASKED_FIELDS = {
    'tax_id',
    'email',
    'phone',
}

REDACTED = '[REDACTED]'


def mask_value(value: Any, visible: int = 4) -> Any:
    """
    Mask all but the last ``visible`` characters of a value.

    Example:
        >>> mask_value('12.345.678/0001-90')
        '**************1-90'
    """
    if value is None:
        return None
    text = str(value)
    if len(text) <= visible:
        return '*' * len(text)
    return '*' * (len(text) - visible) + text[-visible:]


def sanitize_dict(data: Mapping[str, Any], redact_text: str = REDACTED) -> Dict[str, Any]:
    """
    Sanitize a mapping for logging.

    Keys are matched case-insensitively. Nested dicts and lists of dicts
    (e.g. equipment ``units``) are sanitized recursively.

    Example:
        >>> sanitize_dict({'username': 'admin', 'password': 'secret123'})
        {'username': 'admin', 'password': '[REDACTED]'}
    """
    if not data:
        return dict(data) if data is not None else data

    sanitized = {}
    for key, value in data.items():
        lowered = str(key).lower()
        if lowered in SENSITIVE_FIELDS:
            sanitized[key] = redact_text
        elif lowered in MASKED_FIELDS:
            sanitized[key] = mask_value(value)
        elif isinstance(value, Mapping):
            sanitized[key] = sanitize_dict(value, redact_text)
        elif isinstance(value, list):
            sanitized[key] = [
                sanitize_dict(item, redact_text) if isinstance(item, Mapping) else item
                for item in value
            ]
        else:
            sanitized[key] = value

    return sanitized


def sanitize_form_data(form_data, redact_text: str = REDACTED) -> Dict[str, Any]:
    """Sanitize Flask ``request.form`` (or any MultiDict) for logging."""
    return sanitize_dict(form_data.to_dict() if hasattr(form_data, 'to_dict') else dict(form_data), redact_text)
