"""Built-in operators (length, to_upper, to_lower) registered via toylang.runtime."""

from __future__ import annotations

from .runtime import register_builtin
from .tree import Length, ToLower, ToUpper
from .types import Frame, NoLength, ToyArray, ToyNum, ToyString, ToyValue, TYPE_STRING, WrongType, type_of

@register_builtin(Length)
def std_length(_frame: Frame, value: ToyValue) -> ToyNum:
    if isinstance(value, ToyArray):
        return ToyNum(float(len(value.items)))

    raise NoLength(type_of(value))

def _string_arg(name: str, value: ToyValue) -> str:
    if isinstance(value, ToyString):
        return value.value

    raise WrongType(TYPE_STRING, type_of(value), name)

@register_builtin(ToUpper)
def std_to_upper(_frame: Frame, value: ToyValue) -> ToyString:
    return ToyString(_string_arg("to_upper", value).upper())

@register_builtin(ToLower)
def std_to_lower(_frame: Frame, value: ToyValue) -> ToyString:
    return ToyString(_string_arg("to_lower", value).lower())
