class DedupError(Exception):
    """Base class for errors raised by modeldedup."""


class CapabilityUnavailable(DedupError):
    """A field or method accessor could not be resolved."""

    def __init__(self, owner, name):
        self.owner = owner
        self.name = name
        super().__init__('{:s}.{:s} is not accessible'.format(getattr(owner, '__name__', str(owner)), name))


class ImmutableField(DedupError):
    """A field exists but can not be written."""

    def __init__(self, obj, name):
        self.obj = obj
        self.name = name
        super().__init__('{:s}.{:s} is read-only'.format(type(obj).__name__, name))


class DecompositionFailure(DedupError):
    """The children of a node could not be read or written."""

    def __init__(self, node, cause=None):
        self.node = node
        self.cause = cause
        super().__init__('could not decompose {:s}: {!s}'.format(type(node).__name__, cause))
