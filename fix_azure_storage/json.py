import logging
from datetime import datetime
from enum import Enum
from typing import Any, Callable, Dict, Optional, Type, TypeVar

import attrs
import cattrs
from cattrs import override
from cattrs.gen import make_dict_structure_fn, make_dict_unstructure_fn
from dateutil.parser import isoparse

from fix_azure_storage.types import Json, JsonElement
from fix_azure_storage.utils import camel_case

log = logging.getLogger("fix.azure.storage")

AnyT = TypeVar("AnyT")

# the global converter instance
__converter = cattrs.Converter()


def json_name(attribute: "attrs.Attribute[Any]") -> str:
    """
    The name of the attribute in ARM json.
    Use metadata `json_name` if the generated camel case name does not match the API.
    """
    return attribute.metadata.get("json_name") or camel_case(attribute.name)  # type: ignore


def __renames(cls: Type[Any]) -> Dict[str, Any]:
    # private attributes are not part of the json representation
    return {
        a.name: override(omit=True) if a.name.startswith("_") else override(rename=json_name(a))
        for a in attrs.fields(cls)
    }


__converter.register_unstructure_hook_factory(
    attrs.has,
    lambda cls: make_dict_unstructure_fn(cls, __converter, _cattrs_omit_if_default=False, **__renames(cls)),
)
__converter.register_structure_hook_factory(
    attrs.has,
    lambda cls: make_dict_structure_fn(cls, __converter, _cattrs_forbid_extra_keys=False, **__renames(cls)),
)


def register_json(
    cls: Type[AnyT],
    to_json_fn: Optional[Callable[[AnyT], JsonElement]] = None,
    from_json_fn: Optional[Callable[[Any], AnyT]] = None,
) -> None:
    """
    Register a json marshaller/unmarshaller for the given class.
    :param cls: the class to register
    :param to_json_fn: the function to convert the class to json
    :param from_json_fn: the function to convert json to the class
    """
    if from_json_fn is not None:
        __converter.register_structure_hook(cls, lambda obj, _: from_json_fn(obj))
    if to_json_fn is not None:
        __converter.register_unstructure_hook(cls, to_json_fn)


register_json(datetime, lambda dt: dt.isoformat(), isoparse)


def strip_nulls(js: JsonElement) -> JsonElement:
    """
    Remove all null values from the given json element.
    Objects that become empty are removed as well.
    """
    if isinstance(js, dict):
        result = {}
        for k, v in js.items():
            v = strip_nulls(v)
            if v is not None and v != {}:
                result[k] = v
        return result
    elif isinstance(js, list):
        return [strip_nulls(e) for e in js]
    elif isinstance(js, Enum):
        return js.value
    return js


def to_json(node: Any, with_nulls: bool = False) -> Json:
    """
    Convert an attrs object into ARM json.
    Null values are dropped unless with_nulls is set.
    """
    unstructured: Json = __converter.unstructure(node)
    return unstructured if with_nulls else strip_nulls(unstructured)  # type: ignore


def from_json(js: JsonElement, clazz: Type[AnyT]) -> AnyT:
    """
    Loads a json object into a python object.
    :param js: the json object to load.
    :param clazz: the type of the python object.
    :return: the loaded python object.
    """
    try:
        return __converter.structure(js, clazz)
    except Exception as e:
        log.debug(f"Can not deserialize json into class {clazz.__name__}: {js}. Error: {e}")
        raise
