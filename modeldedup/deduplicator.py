import logging

from modeldedup.dedup import Dedup
from modeldedup.fingerprint import is_singleton, is_value_leaf, leaf_key
from modeldedup.rules import Rules

logger = logging.getLogger(__name__)


class Deduplicator(object):

    """
    Rewrites an object graph in place so that structurally equal subgraphs
    share one canonical instance.

    Children are canonicalized before their parent is fingerprinted, so a
    fingerprint built from the identities of canonical children is enough to
    test structural equality. The index is shared by every root given to the
    same Deduplicator; the visited map is fresh for each root.

        d = Deduplicator(max_recursion=10)
        a = d.deduplicate(['A', 'B', 'C'])
        b = d.deduplicate(['A', 'B', 'C'])
        assert a is b
    """

    def __init__(self, rules=None, index=None, max_recursion=6):
        self.rules = Rules() if rules is None else rules
        self.index = Dedup() if index is None else index
        self.max_recursion = max_recursion
        self.failures = 0
        self._visited = {}

    @property
    def successfuls(self):
        return self.index.successfuls

    @property
    def successful_trims(self):
        return self.index.successful_trims

    def add_keys(self, keys):
        """Interns resource keys ahead of the models which refer to them."""
        return [self.deduplicate(k) for k in keys]

    def deduplicate(self, node, depth=0):
        """Deduplicates the graph below `node` and returns the canonical node."""
        self._visited = {}
        try:
            return self._visit(node, depth)
        except RecursionError:
            self.failures += 1
            logger.warning('Recursion limit hit below %s, lower max_recursion', type(node).__name__)
            return node
        finally:
            self._visited = {}

    def _intern(self, node, key):
        canonical = self.index.intern(node, key)
        if canonical is not node:
            self.index.record_full_replacement(node)
        return canonical

    def _visit(self, node, depth):
        if depth > self.max_recursion or is_singleton(node):
            return node

        if is_value_leaf(node):
            return self._intern(node, leaf_key(node))

        rule = self.rules.lookup(type(node))
        if rule is None:
            return node

        # (node, result): holding the node keeps its id from being reused during the pass
        seen = self._visited.get(id(node))
        if seen is not None:
            return seen[1]
        self._visited[id(node)] = (node, node)

        try:
            old = rule.children(node)
            new = [self._visit(child, depth + 1) for child in old]
            trimmed = any(n is not o for n, o in zip(new, old))
            result = rule.rewrite(node, old, new) if trimmed else node
            # rewrite puts back children it could not replace
            trimmed = any(n is not o for n, o in zip(new, old))

            if rule.canonical:
                canonical = self._intern(result, rule.key(result, new))
            else:
                canonical = result
        except RecursionError:
            raise
        except Exception:
            # DecompositionFailure, or anything a host getter or __hash__ raised
            self.failures += 1
            logger.debug('Leaving %s unmodified', type(node).__name__, exc_info=True)
            return node

        if trimmed and canonical is result:
            self.index.record_partial_trim(result)

        self._visited[id(node)] = (node, canonical)
        return canonical
