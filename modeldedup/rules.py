"""
Decomposition rules: how the children of a node of a given type are listed,
rewritten and fingerprinted.

A type without a rule is a leaf for traversal. Built-in containers have rules
out of the box; dataclasses and classes declaring `__dedup_fields__` get one
on first sight. Anything else has to be registered.
"""

import logging
from collections import OrderedDict, defaultdict
from dataclasses import fields, is_dataclass

from modeldedup.accessors import find_field
from modeldedup.errors import CapabilityUnavailable, DecompositionFailure, ImmutableField
from modeldedup.fingerprint import Ref, fingerprint, mapping_fingerprint, unordered_fingerprint

logger = logging.getLogger(__name__)


class Rule(object):
    """
    Base rule. `canonical` says whether a node may be replaced as a whole by
    an equal one, which needs its children to cover all of its state.
    """

    canonical = True

    def children(self, node):
        raise NotImplementedError

    def rewrite(self, node, old, new):
        """Writes changed children back. Returns the node, or a rebuilt one for immutable types."""
        raise NotImplementedError

    def key(self, node, children):
        return fingerprint(node, children)


class ListRule(Rule):

    def children(self, node):
        return list(node)

    def rewrite(self, node, old, new):
        for n in range(len(new)):
            if new[n] is not old[n]:
                node[n] = new[n]
        return node


class TupleRule(Rule):

    def children(self, node):
        return list(node)

    def rewrite(self, node, old, new):
        if type(node) is tuple:
            return tuple(new)
        try:
            return node._make(new)
        except AttributeError:
            return type(node)(new)


def _hashed_by_identity(obj):
    return type(obj).__hash__ is object.__hash__


def _keep_identity_keys(old, new, positions):
    """
    Puts back hash keys that hash by identity: a canonical stand-in would sit
    in a different bucket and may collapse with another key.
    """
    for n in positions:
        if new[n] is not old[n] and _hashed_by_identity(old[n]):
            new[n] = old[n]


class DictRule(Rule):
    """Children are keys and values, interleaved."""

    def children(self, node):
        result = []
        for k, v in node.items():
            result.append(k)
            result.append(v)
        return result

    def rewrite(self, node, old, new):
        _keep_identity_keys(old, new, range(0, len(new), 2))
        pairs = list(zip(new[0::2], new[1::2]))
        if len(dict(pairs)) != len(node):
            raise DecompositionFailure(node, 'canonical keys collide')
        if any(new[n] is not old[n] for n in range(0, len(new), 2)):
            node.clear()
            node.update(pairs)
        else:
            for k, v in pairs:
                node[k] = v
        return node

    def key(self, node, children):
        extra = Ref(node.default_factory) if hasattr(node, 'default_factory') else None
        pairs = zip(children[0::2], children[1::2])
        if isinstance(node, OrderedDict):
            # OrderedDict equality depends on order
            return type(node), extra, fingerprint(node, children)[1]
        return type(node), extra, mapping_fingerprint(node, pairs)[1]


class SetRule(Rule):

    def children(self, node):
        return list(node)

    def rewrite(self, node, old, new):
        _keep_identity_keys(old, new, range(len(new)))
        if len(set(new)) != len(node):
            raise DecompositionFailure(node, 'canonical elements collide')
        node.clear()
        node.update(new)
        return node

    def key(self, node, children):
        return unordered_fingerprint(node, children)


class FrozenSetRule(SetRule):

    def rewrite(self, node, old, new):
        _keep_identity_keys(old, new, range(len(new)))
        if len(set(new)) != len(node):
            raise DecompositionFailure(node, 'canonical elements collide')
        if all(n is o for n, o in zip(new, old)):
            return node
        return type(node)(new)


class FieldsRule(Rule):
    """Children are named fields, read and written through resolved accessors."""

    def __init__(self, cls, names, canonical=True):
        self.cls = cls
        self.names = tuple(names)
        self.canonical = canonical
        self.accessors = [find_field(cls, name) for name in self.names]

    def children(self, node):
        try:
            return [a.get(node) for a in self.accessors]
        except CapabilityUnavailable as e:
            raise DecompositionFailure(node, e) from e

    def rewrite(self, node, old, new):
        for a, o, n in zip(self.accessors, old, new):
            if n is not o:
                try:
                    a.set(node, n)
                except ImmutableField as e:
                    raise DecompositionFailure(node, e) from e
        return node


class InstanceRule(Rule):
    """
    Walks whatever is in an instance's __dict__. The field set is not fixed,
    so nodes are trimmed but never replaced.
    """

    canonical = False

    def children(self, node):
        try:
            return list(vars(node).values())
        except TypeError as e:
            raise DecompositionFailure(node, e) from e

    def rewrite(self, node, old, new):
        attrs = vars(node)
        for name, o, n in zip(list(attrs), old, new):
            if n is not o:
                attrs[name] = n
        return node


BUILTIN_RULES = {
    list: ListRule(),
    tuple: TupleRule(),
    dict: DictRule(),
    OrderedDict: DictRule(),
    defaultdict: DictRule(),
    set: SetRule(),
    frozenset: FrozenSetRule(),
}


class Rules(object):
    """Registry of type -> Rule. Lookup is by exact type."""

    def __init__(self, builtins=True):
        self._rules = dict(BUILTIN_RULES) if builtins else {}
        self._ignored = set()

    def register(self, cls, rule):
        self._rules[cls] = rule
        self._ignored.discard(cls)
        return rule

    def register_fields(self, cls, names, canonical=True):
        return self.register(cls, FieldsRule(cls, names, canonical=canonical))

    def register_instances(self, cls):
        return self.register(cls, InstanceRule())

    def ignore(self, cls):
        """Never walk instances of `cls`, even if a rule could be derived for it."""
        self._rules.pop(cls, None)
        self._ignored.add(cls)

    def __contains__(self, cls):
        return self.lookup(cls) is not None

    def lookup(self, cls):
        try:
            return self._rules[cls]
        except KeyError:
            pass
        if cls in self._ignored:
            return None
        rule = self._derive(cls)
        self._rules[cls] = rule
        return rule

    def _derive(self, cls):
        names = getattr(cls, '__dedup_fields__', None)
        try:
            if names is not None:
                return FieldsRule(cls, names, canonical=getattr(cls, '__dedup_canonical__', True))
            if is_dataclass(cls):
                # eq=False dataclasses compare by identity, so only trim them
                return FieldsRule(cls, [f.name for f in fields(cls)], canonical=cls.__dataclass_params__.eq)
        except CapabilityUnavailable as e:
            logger.warning('No traversal for %s: %s', cls.__name__, e)
            return None
        if issubclass(cls, tuple) and hasattr(cls, '_fields'):
            return BUILTIN_RULES[tuple]
        return None
