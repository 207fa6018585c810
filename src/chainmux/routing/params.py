"""Path parameter converters for route segments like ``{id:int}``.

Only the regex half is used for matching; captured values stay strings
in ``Context.path_params``. ``convert_param`` is there for middlewares
that want the typed value.
"""

# (regex_pattern, python_type) for each supported converter
CONVERTERS: dict[str, tuple[str, type]] = {
    "str": (r"[^/]+", str),
    "int": (r"\d+", int),
    "float": (r"\d+(?:\.\d+)?", float),
    "path": (r".+", str),
}


def convert_param(value: str, param_type: str) -> str | int | float:
    """Convert a captured path parameter string to the converter's type.

    Raises ``ValueError`` if the string cannot be converted and
    ``KeyError`` if *param_type* is not a registered converter.
    """
    _, target_type = CONVERTERS[param_type]
    return target_type(value)
