from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class ResourceKey:
    """
    Identifies an asset: `namespace:path`, optionally with a `#variant`
    for baked models.
    """
    namespace: str
    path: str
    variant: Optional[str] = None

    @classmethod
    def parse(cls, text, default_namespace='minecraft'):
        variant = None
        if '#' in text:
            text, variant = text.split('#', 1)
        if ':' in text:
            namespace, path = text.split(':', 1)
        else:
            namespace, path = default_namespace, text
        return cls(namespace.lower(), path.lower(), variant)

    @classmethod
    def of(cls, key):
        """Accepts a ResourceKey, anything with namespace and path, or a string."""
        if isinstance(key, cls):
            return key
        try:
            return cls(key.namespace, key.path, getattr(key, 'variant', None))
        except AttributeError:
            return cls.parse(str(key))

    def __str__(self):
        if self.variant is None:
            return '{:s}:{:s}'.format(self.namespace, self.path)
        return '{:s}:{:s}#{:s}'.format(self.namespace, self.path, self.variant)

    @property
    def is_builtin(self):
        """Keys kept when the descriptor cache is wiped."""
        if self.namespace not in ('minecraft', 'fml', 'forge'):
            return False
        return self.path.endswith('/generated') or self.path.startswith('builtin/')
