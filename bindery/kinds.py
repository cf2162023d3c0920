"""
Bindery value kinds and their converters.

Each Kind member is one of the eight value types an option may carry. A member
knows the name shown in help ("unsigned int", "string", ...) and how to turn a
raw command-line word into a Python value:

- BOOL    "true"/"false" (case-insensitive)         -> bool
- INT     base-10, signed 32-bit range              -> int
- UINT    base-10, unsigned 32-bit range            -> int
- LONG    base-10, signed 64-bit range              -> int
- FLOAT   decimal/scientific, single precision      -> float
- DOUBLE  decimal/scientific                        -> float
- CHAR    first character of a non-empty word      -> str (length 1)
- STRING  the word verbatim                         -> str

Converters raise ValueError on malformed input; the registry turns that into a
user-facing ConversionError (or InvalidDefaultError at registration time).
"""
import re
import struct
from enum import Enum

# Inclusive bounds for the integral kinds.
_BOUNDS = {
    "int": (-2 ** 31, 2 ** 31 - 1),
    "unsigned int": (0, 2 ** 32 - 1),
    "long": (-2 ** 63, 2 ** 63 - 1),
}


class Kind(Enum):
    """
    the value type of a registered option.

    the member value is the human-readable type name used in help output.
    """
    BOOL = "bool"
    INT = "int"
    UINT = "unsigned int"
    FLOAT = "float"
    DOUBLE = "double"
    LONG = "long"
    CHAR = "char"
    STRING = "string"

    @classmethod
    def resolve(cls, object, /):
        """
        normalize a kind given as a member, a type name or a python builtin.

        accepted forms
        - Kind.INT
        - "int", "INT", "unsigned int", "uint", "str"
        - bool, int, float, str (mapped to BOOL, LONG, DOUBLE, STRING)
        """
        if isinstance(object, cls):
            return object
        if isinstance(object, type):
            try:
                return {bool: cls.BOOL, int: cls.LONG, float: cls.DOUBLE, str: cls.STRING}[object]
            except KeyError:
                raise TypeError(f"unsupported option type {object.__name__!r}") from None
        if isinstance(object, str):
            name = " ".join(object.lower().split())
            aliases = {"uint": "unsigned int", "str": "string"}
            try:
                return cls(aliases.get(name, name))
            except ValueError:
                raise ValueError(f"unknown option type {object!r}") from None
        raise TypeError("option type must be a kind, a type name or a builtin type")

    @property
    def label(self):
        return self.value

    def convert(self, text, /):
        """
        convert a raw word into a value of this kind.

        raises ValueError when the word is not a legal literal for the kind.
        """
        if not isinstance(text, str):
            raise TypeError("convert() argument must be a string")

        match self:
            case Kind.BOOL:
                match text.lower():
                    case "true":
                        return True
                    case "false":
                        return False
                raise ValueError(f"expected 'true' or 'false', got {text!r}")
            case Kind.INT | Kind.UINT | Kind.LONG:
                if not re.fullmatch(r"\s*[+-]?[0-9]+\s*", text):
                    raise ValueError(f"invalid {self.label} literal {text!r}")
                value = int(text, 10)
                lower, upper = _BOUNDS[self.label]
                if not lower <= value <= upper:
                    raise ValueError(f"{self.label} literal {text!r} is out of range")
                return value
            case Kind.FLOAT | Kind.DOUBLE:
                value = float(text)
                if self is Kind.FLOAT:
                    # round to single precision; overflow past FLT_MAX fails
                    try:
                        value, = struct.unpack("f", struct.pack("f", value))
                    except OverflowError:
                        raise ValueError(f"float literal {text!r} is out of range") from None
                return value
            case Kind.CHAR:
                if not text:
                    raise ValueError("expected a character, got an empty word")
                return text[0]
            case Kind.STRING:
                return text


__all__ = (
    "Kind",
)
