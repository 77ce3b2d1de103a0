from typing import Any, Mapping


def _resolve(
        explicit: Any | None,
        conf: Mapping | None,
        key: str | None,
        default: Any,
) -> Any:
    """Return a value using the precedence order: explicit > config entry > default.

    Args:
        explicit (Any | None):
            The value that was explicitly provided by the caller.
        conf (Mapping | None):
            The configuration section to look the key up in.
            If None, the config check is skipped.
        key (str | None):
            The name of the entry to look for in the config section.
            If None, the config check is skipped.
        default (Any):
            The default value to return if neither explicit nor config value is provided.

    Returns:
        Any: The resolved value based on the precedence order.
    """
    if explicit is not None:
        return explicit
    if conf is not None and key is not None:
        value = conf.get(key)
        if value is not None:
            return value
    return default

def iter_update_dict(dt_base: dict, dt_new: dict) -> dict:
    """
    Recursively update a dictionary with another dictionary.

    Args:
        dt_base (dict): The original dictionary to be updated.
        dt_new (dict): The dictionary with updates.

    Returns:
        dict: The updated dictionary.
    """
    for k, vv in dt_new.items():
        if k not in dt_base.keys():
            dt_base[k] = vv
        else:
            v = dt_base.get(k, {})
            if isinstance(v, dict) and isinstance(vv, dict):
                dt_base[k] = iter_update_dict(v, vv)
            else:
                dt_base.update({k: vv})
    return dt_base
