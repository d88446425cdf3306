"""Type lattice for JavaScript values.

A type takes one of three forms:

- a kind string such as "number" (shorthand for a simple type),
- a list of types (shorthand for a union),
- a dict with "kind" and, depending on the kind, "returns", "params",
  "elements" or "anyOf" (the canonical form).

None stands for an unknown type. A union never directly contains another
union; types never contain cycles.
"""

from __future__ import annotations

from typing import Callable

from . import jsvalues

Type = str | list | dict | None


class TypeKind:
    """Kinds of built-in, fundamental types."""

    UNDEFINED = "undefined"
    NULL = "null"
    BOOLEAN = "boolean"
    NUMBER = "number"
    STRING = "string"
    SYMBOL = "symbol"
    OBJECT = "object"
    FUNCTION = "function"
    # meta-types
    ARRAY = "array"
    UNION = "union"
    ANY = "any"


PRIMITIVE_KINDS: frozenset[str] = frozenset(
    {"undefined", "null", "boolean", "number", "string", "symbol"}
)
FALSY_KINDS: frozenset[str] = frozenset({"undefined", "null"})
TRUTHY_KINDS: frozenset[str] = frozenset({"symbol", "object", "function", "array"})

# format_type precedence tiers
_PREC_TOP = 0
_PREC_UNION = 1
_PREC_RETURNS = 2
_PREC_ARRAY = 3


def array_of(elements: Type = None) -> Type:
    """Type of an array with the given optional element type."""
    if not elements:
        return "array"
    return {"kind": "array", "elements": elements}


def kind_of(v: object) -> str:
    """Kind of a concrete JavaScript value."""
    if v is None:
        return "null"
    if isinstance(v, (list, tuple)):
        return "array"
    return jsvalues.typeof(v)


def get_kind(t: Type) -> str | None:
    if isinstance(t, list):
        return "union"
    if isinstance(t, dict):
        return t.get("kind")
    return t


def is_union(t: Type) -> bool:
    return isinstance(t, list) or (isinstance(t, dict) and t.get("kind") == "union")


def get_union_types(t: Type) -> list:
    """Alternatives of a type: the union's own list, [t], or [] for unknown."""
    if isinstance(t, list):
        return t
    if isinstance(t, dict) and t.get("anyOf") is not None:
        return t["anyOf"]
    if t:
        return [t]
    return []


def has_kind(t: Type, kind: str) -> bool:
    """Whether t is of the given kind or is a union with such an alternative."""
    if is_union(t):
        return any(get_kind(alt) == kind for alt in get_union_types(t))
    return get_kind(t) == kind


def is_falsy(t: Type) -> bool:
    """Whether values of type t are always falsy (undefined or null)."""
    if is_union(t):
        alts = get_union_types(t)
        return len(alts) > 0 and all(is_falsy(alt) for alt in alts)
    return get_kind(t) in FALSY_KINDS


def is_truthy(t: Type) -> bool:
    """Whether values of type t are always truthy (symbol, object, function, array)."""
    if is_union(t):
        alts = get_union_types(t)
        return len(alts) > 0 and all(is_truthy(alt) for alt in alts)
    return get_kind(t) in TRUTHY_KINDS


def _field(t: Type, name: str) -> object:
    if isinstance(t, dict):
        return t.get(name)
    return None


def _function_assignable(target: Type, source: Type) -> bool:
    target_returns = _field(target, "returns")
    if target_returns is not None and not is_assignable(target_returns, _field(source, "returns")):
        return False
    target_params = _field(target, "params")
    if target_params is None:
        return True
    source_params = _field(source, "params")
    if source_params is None or len(source_params) != len(target_params):
        return False
    # parameters are contravariant: each source parameter accepts the target's
    for source_param, target_param in zip(source_params, target_params):
        source_type = source_param.get("type")
        if source_type is None:
            continue
        if not is_assignable(source_type, target_param.get("type")):
            return False
    return True


def is_assignable(target: Type, source: Type) -> bool:
    """Whether a value of type source can be used where target is expected."""
    # a union source needs every alternative assignable, checked before
    # target unions so that [a, b, c] <- [b, c] distributes over the source
    if is_union(source):
        return all(is_assignable(target, alt) for alt in get_union_types(source))
    if is_union(target):
        return any(is_assignable(alt, source) for alt in get_union_types(target))
    target_kind = get_kind(target)
    source_kind = get_kind(source)
    if target_kind is None:
        return False
    if target_kind in PRIMITIVE_KINDS:
        return source_kind == target_kind
    if target_kind == "object":
        return source_kind == "object" or source_kind == "array"
    if target_kind == "function":
        return source_kind == "function" and _function_assignable(target, source)
    if target_kind == "array":
        if source_kind != "array":
            return False
        target_elements = _field(target, "elements")
        return target_elements is None or is_assignable(target_elements, _field(source, "elements"))
    return target_kind == "any"


def is_not_assignable(target: Type, source: Type) -> bool:
    """Whether target is known and source is not assignable to it."""
    return target is not None and not is_assignable(target, source)


def _add_member(members: list, t: Type) -> None:
    if t not in members:
        members.append(t)


def _remove_member(members: list, t: Type) -> None:
    if t in members:
        members.remove(t)


def union(a: Type, b: Type) -> Type:
    """Reduced union a | b; unknown if either side is unknown."""
    if a is None or b is None:
        return None
    if is_assignable(a, b):
        return a
    if is_assignable(b, a):
        return b
    a_types = get_union_types(a)
    members = list(a_types)
    for be in get_union_types(b):
        for ae in a_types:
            if is_assignable(be, ae):
                if not is_assignable(ae, be):
                    _remove_member(members, ae)
                    _add_member(members, be)
            elif not is_assignable(ae, be):
                _add_member(members, be)
    if len(members) == 1:
        return members[0]
    return members


def _format_param(param: dict) -> str:
    name = param.get("name")
    param_type = param.get("type")
    if name and param_type is not None:
        return name + ": " + format_type(param_type)
    if param_type is not None:
        return ":" + format_type(param_type)
    return name or "_"


def format_type(t: Type, context_precedence: int = _PREC_TOP) -> str:
    """Render a type, e.g. "(function(:string | null): (number | string))[]".

    Function parameters and their ":" prefix bind loosest, then "|", then
    a return type's ":" prefix, then the "[]" suffix. A nested type is
    parenthesized only when it binds looser than its position requires.
    """
    precedence = None
    if is_union(t):
        precedence = _PREC_UNION
        result = " | ".join(format_type(alt, _PREC_UNION) for alt in get_union_types(t))
    else:
        kind = get_kind(t)
        if kind is None:
            result = "unknown"
        else:
            result = kind
        if kind == "function":
            params = _field(t, "params")
            if params is not None:
                result += "(" + ", ".join(_format_param(p) for p in params) + ")"
            returns = _field(t, "returns")
            if returns is not None:
                precedence = _PREC_RETURNS
                result += ": " + format_type(returns, _PREC_RETURNS)
        elif kind == "array":
            elements = _field(t, "elements")
            if elements is not None:
                return format_type(elements, _PREC_ARRAY) + "[]"
    if precedence is not None and precedence < context_precedence:
        result = "(" + result + ")"
    return result


def _map_if_changed(items: list, fn: Callable) -> list:
    mapped = [fn(item) for item in items]
    if all(old is new for old, new in zip(items, mapped)):
        return items
    return mapped


def _transform_param(param: dict, fn: Callable) -> dict:
    param_type = param.get("type")
    if param_type is None:
        return param
    new_type = fn(param_type)
    if new_type is param_type:
        return param
    result = dict(param)
    result["type"] = new_type
    return result


def _transform_function(t: dict, fn: Callable) -> dict:
    returns = t.get("returns")
    new_returns = fn(returns) if returns is not None else None
    params = t.get("params")
    new_params = None
    if params is not None:
        new_params = _map_if_changed(params, lambda p: _transform_param(p, fn))
    if new_returns is returns and new_params is params:
        return t
    result = dict(t)
    if new_returns is not returns:
        result["returns"] = new_returns
    if new_params is not params:
        result["params"] = new_params
    return result


def _transform_array(t: dict, fn: Callable) -> dict:
    elements = t.get("elements")
    if elements is not None:
        new_elements = fn(elements)
        if new_elements is not elements:
            result = dict(t)
            result["elements"] = new_elements
            return result
    return t


def _transform_union(t: dict, fn: Callable) -> dict:
    any_of = t.get("anyOf")
    if any_of is not None:
        new_any_of = _map_if_changed(any_of, fn)
        if new_any_of is not any_of:
            result = dict(t)
            result["anyOf"] = new_any_of
            return result
    return t


def _transform_nested(t: dict, fn: Callable) -> dict:
    kind = t.get("kind")
    if kind == "function":
        return _transform_function(t, fn)
    if kind == "array":
        return _transform_array(t, fn)
    if kind == "union":
        return _transform_union(t, fn)
    return t


def to_canonical(t: Type) -> dict | None:
    """The type as a canonical dict, converting nested types too."""
    if isinstance(t, list):
        return {"kind": "union", "anyOf": [to_canonical(alt) for alt in t]}
    if isinstance(t, str):
        return {"kind": t}
    if isinstance(t, dict):
        return _transform_nested(t, to_canonical)
    return t


def to_shorthand(t: Type) -> Type:
    """The type in shorthand form where one exists.

    A function with neither returns nor params becomes "function", an array
    without elements becomes "array", a union becomes a list, and any other
    kind becomes its kind string. A dict that has to change is copied first
    so that extra keys set by the caller survive.
    """
    if isinstance(t, dict) and t.get("kind"):
        kind = t["kind"]
        if kind == "function":
            if t.get("returns") is None and t.get("params") is None:
                return kind
            return _transform_function(t, to_shorthand)
        if kind == "array":
            if t.get("elements") is None:
                return kind
            return _transform_array(t, to_shorthand)
        if kind == "union":
            return _map_if_changed(t.get("anyOf") or [], to_shorthand)
        return kind
    if isinstance(t, list):
        return _map_if_changed(t, to_shorthand)
    return t
