"""Params normalisation.

JSON-RPC 2.0 only allows ``params`` to be absent, an array or an object.
``params(*args)`` maps a call's positional arguments onto one of those:

* no arguments                 → ``None`` (the field is omitted)
* one ``None``                 → ``[None]``
* one list/tuple/set/mapping   → the argument itself
* one dataclass instance       → the argument itself (encoded as an object)
* one ``weakref.ref``          → followed, then the rules above
* one scalar (or anything else)→ ``[arg]``
* two or more arguments        → ``[arg1, arg2, ...]``

Empty containers are sent literally (``[]`` / ``{}``); only calling with
no arguments omits params.
"""

from __future__ import annotations

import dataclasses
import weakref
from collections.abc import Mapping
from typing import Any

_SEQUENCE_TYPES = (list, tuple, set, frozenset)


def _deref(value: Any) -> Any:
    while isinstance(value, weakref.ref):
        value = value()
    return value


def is_composite(value: Any) -> bool:
    """True if *value* already serialises to a JSON array or object."""
    if isinstance(value, _SEQUENCE_TYPES) or isinstance(value, Mapping):
        return True
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def params(*args: Any) -> Any:
    if not args:
        return None

    if len(args) > 1:
        return list(args)

    value = _deref(args[0])
    if value is not None and is_composite(value):
        return value
    # scalars, None and anything unclassifiable stay positional
    return [value]
