"""
Narrow access to fields and methods that foreign types do not expose publicly.

Lookups are resolved once per (type, name) and cached. A name is matched
against the public spelling, the single-underscore spelling and the
name-mangled spelling used for double-underscore attributes.
"""

import logging
from dataclasses import fields, is_dataclass

from modeldedup.errors import CapabilityUnavailable, ImmutableField

logger = logging.getLogger(__name__)

_resolved = {}


def _candidates(cls, name):
    bare = name.lstrip('_')
    yield name
    yield '_' + bare
    for klass in cls.__mro__:
        yield '_{:s}__{:s}'.format(klass.__name__.lstrip('_'), bare)


def _declared(cls):
    """Names a type declares for its instances: slots, annotations, class attributes and traversal fields."""
    names = set()
    for klass in cls.__mro__:
        slots = klass.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        names.update(slots)
        names.update(klass.__dict__.get('__annotations__', {}))
        names.update(klass.__dict__)
    if is_dataclass(cls):
        names.update(f.name for f in fields(cls))
    names.update(getattr(cls, '__dedup_fields__', ()))
    return names


class FieldAccessor(object):
    """Reads and writes one resolved field on instances of one type."""

    __slots__ = ('owner', 'name', 'attr')

    def __init__(self, owner, name, attr):
        self.owner = owner
        self.name = name
        self.attr = attr

    def get(self, obj):
        try:
            return getattr(obj, self.attr)
        except AttributeError:
            raise CapabilityUnavailable(type(obj), self.name) from None

    def set(self, obj, value):
        try:
            setattr(obj, self.attr, value)
            return
        except AttributeError:
            pass
        # frozen dataclasses and similar block normal assignment only
        try:
            object.__setattr__(obj, self.attr, value)
        except (AttributeError, TypeError):
            raise ImmutableField(obj, self.name) from None

    def __repr__(self):
        return 'FieldAccessor({:s}.{:s})'.format(self.owner.__name__, self.attr)


def find_field(cls, name, required=True):
    """
    Resolves an accessor for field `name` of `cls`.

    Raises CapabilityUnavailable when the field can not be found and
    `required` is set, otherwise logs a warning and returns None.
    """
    key = (cls, name)
    if key in _resolved:
        accessor = _resolved[key]
    else:
        declared = _declared(cls)
        accessor = None
        for attr in _candidates(cls, name):
            if attr in declared:
                accessor = FieldAccessor(cls, name, attr)
                break
        _resolved[key] = accessor

    if accessor is None:
        if required:
            raise CapabilityUnavailable(cls, name)
        logger.warning('Field %s.%s is not accessible, dependent feature disabled', cls.__name__, name)
    return accessor


def find_field_getter(cls, name, required=True):
    accessor = find_field(cls, name, required=required)
    return None if accessor is None else accessor.get


def find_method(cls, name, required=False):
    """
    Resolves a method of `cls` by name, including underscore-prefixed and
    name-mangled spellings. Returns the unbound function.
    """
    key = (cls, name, 'method')
    if key not in _resolved:
        method = None
        for attr in _candidates(cls, name):
            candidate = getattr(cls, attr, None)
            if callable(candidate):
                method = candidate
                break
        _resolved[key] = method

    method = _resolved[key]
    if method is None:
        if required:
            raise CapabilityUnavailable(cls, name)
        logger.warning('Method %s.%s is not accessible, using fallback', cls.__name__, name)
    return method


def _instance_accessor(obj, name):
    for attr in _candidates(type(obj), name):
        if hasattr(obj, attr):
            return FieldAccessor(type(obj), name, attr)
    raise CapabilityUnavailable(type(obj), name)


def get_field(obj, name):
    return _instance_accessor(obj, name).get(obj)


def set_field(obj, name, value):
    _instance_accessor(obj, name).set(obj, value)


def invoke_hidden(obj, name, *args, **kwargs):
    return find_method(type(obj), name, required=True)(obj, *args, **kwargs)


def static_roots(holder, of_type):
    """
    Yields the class-level values of `holder` that are instances of `of_type`,
    including the elements of class-level lists and tuples of them.
    """
    for klass in reversed(holder.__mro__):
        for name, value in list(vars(klass).items()):
            if name.startswith('__'):
                continue
            if isinstance(value, of_type):
                yield value
            elif isinstance(value, (list, tuple)) and value and all(isinstance(v, of_type) for v in value):
                yield from value
