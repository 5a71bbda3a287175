from typing import Any, Mapping, Sequence

def normalize_null_strings(obj: Any) -> Any:
    """Recursively convert placeholder strings to None inside dict/list structures.

    Manifest authors write `null`, `None` or leave a value blank when a key has
    no meaning for their package; all of those are treated as absent.

    Args:
        obj: The object to process. Can be a string, mapping, sequence, or other type.

    Returns:
        The processed object with placeholder strings converted to None.
        Other types are returned as-is.
    """
    if isinstance(obj, str):
        stripped = obj.strip()
        return None if stripped.lower() in {"", "null", "none"} else stripped
    if isinstance(obj, Mapping):
        return {k: normalize_null_strings(v) for k, v in obj.items()}
    if isinstance(obj, Sequence) and not isinstance(obj, (str, bytes)):
        return [normalize_null_strings(v) for v in obj]
    return obj
