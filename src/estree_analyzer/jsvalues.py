"""Python model of JavaScript runtime values for constant folding.

JavaScript values map onto Python values as follows: `null` is `None`,
`undefined` is `UNDEFINED`, booleans are `bool`, numbers are `int` or
`float`, strings are `str`, arrays are `list`, plain objects are `dict`
with string keys, and symbols are `Symbol`. Every operation here follows
the ECMAScript abstract operations closely enough that folding a constant
expression gives the value a JavaScript engine would compute.
"""

from __future__ import annotations

import math
import re

# Numbers above this magnitude lose integer precision as IEEE doubles.
_MAX_SAFE_INT: int = 2**53
_UINT32: int = 2**32
_INT32_SIGN: int = 2**31

_JS_WHITESPACE: str = " \t\n\r\v\f\u00a0\u1680\u2000\u2028\u2029\u202f\u205f\u3000\ufeff"
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?)")
_RADIX_RE = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_RADIX: dict[str, int] = {"x": 16, "o": 8, "b": 2}


class _Undefined:
    _instance: _Undefined | None = None

    def __new__(cls) -> _Undefined:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


UNDEFINED = _Undefined()


class Symbol:
    """A JavaScript symbol. Identity is the only equality."""

    def __init__(self, description: str | None = None):
        self.description = description

    def __repr__(self) -> str:
        if self.description is None:
            return "Symbol()"
        return "Symbol(" + self.description + ")"


class JSThrow(Exception):
    """A JavaScript exception that evaluating an operation would throw."""

    def __init__(self, msg: str, error_name: str = "TypeError"):
        super().__init__(error_name + ": " + msg)
        self.msg = msg
        self.error_name = error_name


# ---------------------------------------------------------------------------
# TYPE TESTS
# ---------------------------------------------------------------------------


def is_number(v: object) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def is_object(v: object) -> bool:
    """True for values that are JavaScript objects (not primitives)."""
    return isinstance(v, (list, tuple, dict)) or (
        v is not None
        and v is not UNDEFINED
        and not isinstance(v, (bool, int, float, str, Symbol))
    )


def typeof(v: object) -> str:
    """The result of the JavaScript `typeof` operator."""
    if v is UNDEFINED:
        return "undefined"
    if v is None:
        return "object"
    if isinstance(v, bool):
        return "boolean"
    if is_number(v):
        return "number"
    if isinstance(v, str):
        return "string"
    if isinstance(v, Symbol):
        return "symbol"
    if callable(v):
        return "function"
    return "object"


def _type_tag(v: object) -> str:
    if v is None:
        return "null"
    return typeof(v)


# ---------------------------------------------------------------------------
# CONVERSIONS
# ---------------------------------------------------------------------------


def truthy(v: object) -> bool:
    """ToBoolean."""
    if v is None or v is UNDEFINED:
        return False
    if isinstance(v, bool):
        return v
    if is_number(v):
        return not (v == 0 or math.isnan(v))
    if isinstance(v, str):
        return len(v) > 0
    return True


def to_primitive(v: object) -> object:
    if isinstance(v, (list, tuple, dict)):
        return to_string(v)
    return v


def _string_to_number(s: str) -> float | int:
    s = s.strip(_JS_WHITESPACE)
    if s == "":
        return 0
    if s in ("Infinity", "+Infinity"):
        return math.inf
    if s == "-Infinity":
        return -math.inf
    m = _RADIX_RE.fullmatch(s)
    if m is not None:
        try:
            return int(m.group(2), _RADIX[m.group(1).lower()])
        except ValueError:
            return math.nan
    if _DECIMAL_RE.fullmatch(s) is None:
        return math.nan
    f = float(s)
    if f.is_integer() and abs(f) <= _MAX_SAFE_INT and not _is_negative_zero(f):
        return int(f)
    return f


def to_number(v: object) -> int | float:
    """ToNumber."""
    if v is UNDEFINED:
        return math.nan
    if v is None:
        return 0
    if isinstance(v, bool):
        return 1 if v else 0
    if is_number(v):
        return v
    if isinstance(v, str):
        return _string_to_number(v)
    if isinstance(v, Symbol):
        raise JSThrow("Cannot convert a Symbol value to a number")
    return to_number(to_primitive(v))


def _normalize(n: int | float) -> int | float:
    if isinstance(n, int) and abs(n) > _MAX_SAFE_INT:
        return float(n)
    return n


def _is_negative_zero(n: int | float) -> bool:
    return n == 0 and math.copysign(1.0, n) < 0


def _int_product_sign(n: int, x: int, y: int) -> int | float:
    # ints have no -0, so a zero from operands of opposite sign becomes -0.0
    if n == 0 and (x < 0) != (y < 0):
        return -0.0
    return _normalize(n)


def to_int32(v: object) -> int:
    n = to_number(v)
    if isinstance(n, float):
        if math.isnan(n) or math.isinf(n):
            return 0
        n = math.trunc(n)
    n %= _UINT32
    if n >= _INT32_SIGN:
        n -= _UINT32
    return n


def to_uint32(v: object) -> int:
    n = to_number(v)
    if isinstance(n, float):
        if math.isnan(n) or math.isinf(n):
            return 0
        n = math.trunc(n)
    return n % _UINT32


def number_to_string(x: int | float) -> str:
    """Number::toString with radix 10."""
    if isinstance(x, int):
        if abs(x) < 10**21:
            return str(x)
        x = float(x)
    if math.isnan(x):
        return "NaN"
    if x == 0:
        return "0"
    if math.isinf(x):
        return "Infinity" if x > 0 else "-Infinity"
    if x < 0:
        return "-" + number_to_string(-x)
    if x.is_integer() and x < 1e21:
        return str(int(x))
    # x = 0.digits * 10**point, digits being the shortest round-trip digits
    text = repr(x)
    exponent = 0
    if "e" in text:
        text, exp_text = text.split("e")
        exponent = int(exp_text)
    whole, _, frac = text.partition(".")
    digits = whole + frac
    point = len(whole) + exponent
    stripped = digits.lstrip("0")
    point -= len(digits) - len(stripped)
    digits = stripped.rstrip("0")
    k = len(digits)
    n = point
    if k <= n <= 21:
        return digits + "0" * (n - k)
    if 0 < n <= 21:
        return digits[:n] + "." + digits[n:]
    if -6 < n <= 0:
        return "0." + "0" * (-n) + digits
    e = n - 1
    sign = "+" if e >= 0 else "-"
    mantissa = digits if k == 1 else digits[0] + "." + digits[1:]
    return mantissa + "e" + sign + str(abs(e))


def to_string(v: object) -> str:
    """ToString."""
    if v is UNDEFINED:
        return "undefined"
    if v is None:
        return "null"
    if isinstance(v, bool):
        return "true" if v else "false"
    if is_number(v):
        return number_to_string(v)
    if isinstance(v, str):
        return v
    if isinstance(v, Symbol):
        raise JSThrow("Cannot convert a Symbol value to a string")
    if isinstance(v, (list, tuple)):
        parts: list[str] = []
        for e in v:
            parts.append("" if e is None or e is UNDEFINED else to_string(e))
        return ",".join(parts)
    return "[object Object]"


def to_property_key(v: object) -> str | Symbol:
    if isinstance(v, Symbol):
        return v
    return to_string(v)


def _array_index(key: str) -> int | None:
    if key.isdigit() and str(int(key)) == key:
        return int(key)
    return None


# ---------------------------------------------------------------------------
# PROPERTY ACCESS
# ---------------------------------------------------------------------------


def get_property(obj: object, key: object) -> object:
    """Read `obj[key]` for the own properties this model knows about.

    Raises KeyError for any other key, since a prototype may supply it
    (`toString`, `map`, `hasOwnProperty`).
    """
    if obj is None or obj is UNDEFINED:
        raise JSThrow(
            "Cannot read properties of " + to_string(obj) + " (reading '" + str(key) + "')"
        )
    prop = to_property_key(key)
    if isinstance(prop, Symbol):
        raise KeyError(prop)
    if isinstance(obj, (str, list, tuple)):
        if prop == "length":
            return len(obj)
        index = _array_index(prop)
        if index is not None and index < len(obj):
            return obj[index]
    elif isinstance(obj, dict) and prop in obj:
        return obj[prop]
    raise KeyError(prop)


def has_property(key: object, obj: object) -> bool:
    """The `in` operator."""
    if not is_object(obj):
        raise JSThrow(
            "Cannot use 'in' operator to search for '" + str(key) + "' in " + to_string(obj)
        )
    prop = to_property_key(key)
    if isinstance(prop, Symbol):
        return False
    if isinstance(obj, (list, tuple)):
        if prop == "length":
            return True
        index = _array_index(prop)
        return index is not None and index < len(obj)
    if isinstance(obj, dict):
        return prop in obj
    return False


def instance_of(value: object, ctor: object) -> bool:
    """The `instanceof` operator. Folded values are never constructors."""
    if not callable(ctor):
        raise JSThrow("Right-hand side of 'instanceof' is not callable")
    return False


# ---------------------------------------------------------------------------
# OPERATORS
# ---------------------------------------------------------------------------


def strict_equals(a: object, b: object) -> bool:
    ta = _type_tag(a)
    if ta != _type_tag(b):
        return False
    if ta in ("undefined", "null"):
        return True
    if ta in ("number", "string", "boolean"):
        return a == b
    return a is b


def loose_equals(a: object, b: object) -> bool:
    ta = _type_tag(a)
    tb = _type_tag(b)
    if ta == tb:
        return strict_equals(a, b)
    if ta in ("undefined", "null") and tb in ("undefined", "null"):
        return True
    if ta == "number" and tb == "string":
        return a == to_number(b)
    if ta == "string" and tb == "number":
        return to_number(a) == b
    if ta == "boolean":
        return loose_equals(to_number(a), b)
    if tb == "boolean":
        return loose_equals(a, to_number(b))
    if ta in ("number", "string", "symbol") and tb == "object":
        return loose_equals(a, to_primitive(b))
    if ta == "object" and tb in ("number", "string", "symbol"):
        return loose_equals(to_primitive(a), b)
    return False


def _less_than(a: object, b: object) -> bool | None:
    """Abstract relational comparison; None stands for `undefined` (NaN)."""
    pa = to_primitive(a)
    pb = to_primitive(b)
    if isinstance(pa, str) and isinstance(pb, str):
        return pa < pb
    na = to_number(pa)
    nb = to_number(pb)
    if math.isnan(na) or math.isnan(nb):
        return None
    return na < nb


def less_than(a: object, b: object) -> bool:
    return _less_than(a, b) is True


def greater_than(a: object, b: object) -> bool:
    return _less_than(b, a) is True


def less_equal(a: object, b: object) -> bool:
    return _less_than(b, a) is False


def greater_equal(a: object, b: object) -> bool:
    return _less_than(a, b) is False


def add(a: object, b: object) -> object:
    pa = to_primitive(a)
    pb = to_primitive(b)
    if isinstance(pa, str) or isinstance(pb, str):
        return to_string(pa) + to_string(pb)
    return _normalize(to_number(pa) + to_number(pb))


def subtract(a: object, b: object) -> int | float:
    return _normalize(to_number(a) - to_number(b))


def multiply(a: object, b: object) -> int | float:
    x = to_number(a)
    y = to_number(b)
    if isinstance(x, float) or isinstance(y, float):
        return float(x) * float(y)
    return _int_product_sign(x * y, x, y)


def divide(a: object, b: object) -> int | float:
    x = to_number(a)
    y = to_number(b)
    if y == 0:
        if x == 0 or math.isnan(x):
            return math.nan
        return math.copysign(math.inf, x) * math.copysign(1.0, y)
    if isinstance(x, int) and isinstance(y, int) and x % y == 0:
        return _int_product_sign(x // y, x, y)
    return x / y


def remainder(a: object, b: object) -> int | float:
    x = to_number(a)
    y = to_number(b)
    if y == 0 or math.isnan(x) or math.isnan(y) or math.isinf(x):
        return math.nan
    if math.isinf(y):
        return x
    if isinstance(x, int) and isinstance(y, int):
        r = abs(x) % abs(y)
        if x < 0:
            return -r if r else -0.0
        return r
    return math.fmod(x, y)


def exponent(a: object, b: object) -> int | float:
    x = to_number(a)
    y = to_number(b)
    if math.isnan(y):
        return math.nan
    if y == 0:
        return 1
    if abs(x) == 1 and math.isinf(y):
        return math.nan
    if x == 0 and y < 0:
        return math.inf
    try:
        r = math.pow(x, y)
    except OverflowError:
        return math.inf if x > 0 or float(y).is_integer() and y % 2 == 0 else -math.inf
    except ValueError:
        return math.nan
    if isinstance(x, int) and isinstance(y, int) and r.is_integer() and abs(r) <= _MAX_SAFE_INT:
        return int(r)
    return r


def shift_left(a: object, b: object) -> int:
    return to_int32(to_int32(a) << (to_uint32(b) & 31))


def shift_right(a: object, b: object) -> int:
    return to_int32(a) >> (to_uint32(b) & 31)


def shift_right_unsigned(a: object, b: object) -> int:
    return to_uint32(a) >> (to_uint32(b) & 31)


def bit_and(a: object, b: object) -> int:
    return to_int32(to_int32(a) & to_int32(b))


def bit_or(a: object, b: object) -> int:
    return to_int32(to_int32(a) | to_int32(b))


def bit_xor(a: object, b: object) -> int:
    return to_int32(to_int32(a) ^ to_int32(b))


def negate(v: object) -> int | float:
    n = to_number(v)
    if n == 0 and isinstance(n, int):
        return -0.0
    return -n


def bit_not(v: object) -> int:
    return ~to_int32(v)


def logical_not(v: object) -> bool:
    return not truthy(v)


def _not_loose_equals(a: object, b: object) -> bool:
    return not loose_equals(a, b)


def _not_strict_equals(a: object, b: object) -> bool:
    return not strict_equals(a, b)


BINARY_OPERATORS = {
    "==": loose_equals,
    "!=": _not_loose_equals,
    "===": strict_equals,
    "!==": _not_strict_equals,
    "<": less_than,
    "<=": less_equal,
    ">": greater_than,
    ">=": greater_equal,
    "<<": shift_left,
    ">>": shift_right,
    ">>>": shift_right_unsigned,
    "+": add,
    "-": subtract,
    "*": multiply,
    "/": divide,
    "%": remainder,
    "**": exponent,
    "|": bit_or,
    "^": bit_xor,
    "&": bit_and,
    "in": has_property,
    "instanceof": instance_of,
}


def _delete(v: object) -> bool:
    return True


def _void(v: object) -> object:
    return UNDEFINED


UNARY_OPERATORS = {
    "-": negate,
    "+": to_number,
    "!": logical_not,
    "~": bit_not,
    "typeof": typeof,
    "void": _void,
    "delete": _delete,
}
