from collections import defaultdict


class Dedup(object):

    """
    Ensures that only one copy of an object exists per fingerprint.

    if fingerprint(a) == fingerprint(b) and a is not b:
        seen = Dedup()
        a = seen.intern(a, fingerprint(a))
        b = seen.intern(b, fingerprint(b))
        assert(a is b)

    The first object seen for a fingerprint stays canonical for the
    lifetime of the index.
    """

    def __init__(self):
        self._dict = {}
        self._eliminated = 0
        self.successfuls = 0
        self.successful_trims = 0
        self.type_counts = defaultdict(int)

    def intern(self, node, key):
        if key in self._dict:
            self._eliminated += 1
            return self._dict[key]
        else:
            self._dict[key] = node
            return node

    def __contains__(self, key):
        return key in self._dict

    def __getitem__(self, key):
        return self._dict[key]

    def __len__(self):
        return len(self._dict)

    def record_full_replacement(self, node):
        self.successfuls += 1
        self.type_counts[type(node).__name__] += 1

    def record_partial_trim(self, node):
        self.successful_trims += 1

    def clear(self):
        self._dict.clear()
        self._eliminated = 0
        self.successfuls = 0
        self.successful_trims = 0
        self.type_counts.clear()

    @property
    def eliminated(self):
        return self._eliminated

    def stats(self):
        """Full replacements per type name, least frequent first."""
        return sorted(self.type_counts.items(), key=lambda x: x[1])
