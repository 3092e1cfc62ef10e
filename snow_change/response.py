"""Field extraction from change API responses."""

import json


def extract_result_field(raw: str, name: str) -> str:
    """
    Return ``result.<name>`` from a JSON response body as a string.

    Malformed JSON, a missing ``result`` object, a missing field and a
    null or false value all yield an empty string.

    Args:
        raw: Response body text.
        name: Field name under ``result``.

    Returns:
        The field value, or "" if absent.
    """
    try:
        data = json.loads(raw)
    except (TypeError, ValueError, RecursionError):
        return ""

    if not isinstance(data, dict):
        return ""

    result = data.get('result')
    if not isinstance(result, dict):
        return ""

    value = result.get(name)
    if value is None or value is False:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (bool, dict, list)):
        return json.dumps(value)
    return str(value)
