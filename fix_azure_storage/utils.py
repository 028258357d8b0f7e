import re
from typing import TypeVar

T = TypeVar("T")

_word_boundary = re.compile(r"_([a-z0-9])")


def camel_case(name: str) -> str:
    """
    Convert a python attribute name into the camel case name used by the Azure API.
    is_hns_enabled -> isHnsEnabled
    """
    return _word_boundary.sub(lambda m: m.group(1).upper(), name.lstrip("_"))


def case_insensitive_eq(left: T, right: T) -> bool:
    if isinstance(left, str) and isinstance(right, str):
        return left.lower() == right.lower()
    else:
        return left == right
