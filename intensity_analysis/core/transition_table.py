"""
Transition Table Builder

Decodes a per-interval transition histogram into TransitionRecords. The
histogram maps an encoded key to a pixel count; keys pack the pair as
``from_class * 100 + to_class`` and arrive either as integers, as the
decimal strings produced by frequency-histogram reducers, or already split
into ``(from_class, to_class)`` pairs.
"""

import math
import numbers
from typing import Any, Dict, List, Mapping, Tuple

from shared_utils import get_logger

from .class_scheme import KEY_BASE, ClassScheme
from .exceptions import MalformedTransitionKey
from .models import TransitionRecord

logger = get_logger('transition_table')


def encode_transition(from_class: int, to_class: int) -> int:
    """Pack a (from, to) class pair into a single histogram key."""
    return from_class * KEY_BASE + to_class


def decode_transition_key(key: Any, class_scheme: ClassScheme) -> Tuple[int, int]:
    """
    Decode one histogram key into a (from_class, to_class) pair.

    Args:
        key: Integer key, decimal string key, or (from, to) pair
        class_scheme: Scheme both classes must belong to

    Returns:
        Tuple of (from_class, to_class)

    Raises:
        MalformedTransitionKey: If the key cannot be parsed or decodes to a
            class outside the scheme
    """
    if isinstance(key, tuple):
        if len(key) != 2:
            raise MalformedTransitionKey(key, "pair keys must have exactly two elements")
        from_class, to_class = (_as_int(part, key) for part in key)
    else:
        code = _as_int(key, key)
        if code < 0:
            raise MalformedTransitionKey(key, "negative key")
        from_class, to_class = divmod(code, KEY_BASE)

    for role, class_id in (('source', from_class), ('destination', to_class)):
        if class_id not in class_scheme:
            raise MalformedTransitionKey(
                key, f"{role} class {class_id} is not in the class scheme {class_scheme.ids}"
            )
    return from_class, to_class


def _as_int(value: Any, key: Any) -> int:
    if isinstance(value, bool):
        raise MalformedTransitionKey(key, "boolean is not a class code")
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Real):
        if float(value).is_integer():
            return int(value)
        raise MalformedTransitionKey(key, "non-integer code")
    if isinstance(value, str):
        text = value.strip()
        try:
            return int(text)
        except ValueError:
            pass
        try:
            as_float = float(text)
        except ValueError:
            raise MalformedTransitionKey(key, "not a number")
        if as_float.is_integer():
            return int(as_float)
        raise MalformedTransitionKey(key, "non-integer code")
    raise MalformedTransitionKey(key, f"unsupported key type {type(value).__name__}")


def build_transition_table(histogram: Mapping[Any, Any],
                           class_scheme: ClassScheme) -> List[TransitionRecord]:
    """
    Convert a raw transition histogram into transition records.

    Keys that decode to the same (from, to) pair are merged by summing their
    counts, so the result holds one record per distinct pair.

    Args:
        histogram: Mapping of encoded transition key to pixel count
        class_scheme: Valid classes for decoding

    Returns:
        List of TransitionRecord (order carries no meaning)

    Raises:
        MalformedTransitionKey: On undecodable keys or negative, non-finite or
            non-numeric counts
    """
    counts: Dict[Tuple[int, int], Any] = {}

    for key, value in histogram.items():
        pair = decode_transition_key(key, class_scheme)

        if isinstance(value, bool) or not isinstance(value, numbers.Real):
            raise MalformedTransitionKey(key, f"pixel count {value!r} is not numeric")
        if not math.isfinite(value):
            raise MalformedTransitionKey(key, f"pixel count {value!r} is not finite")
        if value < 0:
            raise MalformedTransitionKey(key, f"negative pixel count {value}")

        if pair in counts:
            logger.debug(f"Merging duplicate transition {pair} from key {key!r}")
            counts[pair] += value
        else:
            counts[pair] = value

    return [TransitionRecord(f, t, n) for (f, t), n in counts.items()]
