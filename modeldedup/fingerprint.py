from enum import Enum

import numpy as np


VALUE_TYPES = (str, bytes, int, float, complex, np.ndarray)


class Ref(object):
    """
    Holds a reference to an object. Hashable and equal only by identity
    of the referenced object, whatever that object's own __eq__ says.
    """
    __slots__ = ('obj',)

    def __init__(self, obj):
        self.obj = obj

    def __hash__(self):
        return id(self.obj)

    def __eq__(self, other):
        return type(other) is Ref and other.obj is self.obj

    def __repr__(self):
        return 'Ref({:s}@{:x})'.format(type(self.obj).__name__, id(self.obj))


def is_singleton(obj):
    """Objects which are already unique: never interned, never counted."""
    return obj is None or type(obj) is bool or isinstance(obj, (Enum, type))


def is_value_leaf(obj):
    if isinstance(obj, np.ndarray):
        return not obj.dtype.hasobject
    return isinstance(obj, VALUE_TYPES) and type(obj) is not bool


def leaf_key(obj):
    """
    Key for an immutable value. The concrete type is part of the key so that
    1, 1.0 and True never compare equal.
    """
    t = type(obj)
    if isinstance(obj, float):
        # distinguishes -0.0 from 0.0, and makes nan equal to itself
        return t, obj.hex()
    if isinstance(obj, complex):
        return t, obj.real.hex(), obj.imag.hex()
    if isinstance(obj, np.ndarray):
        return t, obj.dtype.str, obj.shape, np.ascontiguousarray(obj).tobytes()
    return t, obj


def child_key(obj):
    if is_singleton(obj):
        return obj
    if is_value_leaf(obj):
        return leaf_key(obj)
    return Ref(obj)


def fingerprint(node, children):
    """
    Fingerprint of a node from its type and its ordered children, which must
    already be canonical.
    """
    return type(node), tuple(child_key(c) for c in children)


def unordered_fingerprint(node, elements):
    return type(node), frozenset(child_key(e) for e in elements)


def mapping_fingerprint(node, items):
    return type(node), frozenset((child_key(k), child_key(v)) for k, v in items)
