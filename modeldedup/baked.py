"""
Baked models whose quads are derived lazily from immutable inputs.

The quads live in a LazyCache slot keyed by the inputs, so they are built on
first use, may be reclaimed under memory pressure, and are rebuilt on the
next request. Models with equal inputs share one list of quads.
"""

import logging
from collections import namedtuple

from modeldedup.accessors import find_field_getter, find_method
from modeldedup.lazycache import LazyCache, ReclaimPool

logger = logging.getLogger(__name__)

MISSING_TEXTURE = 'missingno'
FRONT = 'south'

BakeInputs = namedtuple('BakeInputs', ('sprites', 'format', 'transform'))

default_cache = LazyCache(ReclaimPool(capacity=4096))


class LazyQuadModel(object):

    __dedup_fields__ = ('inputs', 'particle', 'overrides', 'build')

    def __init__(self, inputs, build, particle=None, overrides=None, cache=None):
        self.inputs = inputs
        self.build = build
        self.particle = particle
        self.overrides = overrides
        self._cache = default_cache if cache is None else cache

    def get_quads(self, side=None):
        """All quads belong to the general face; any specific side has none."""
        if side is not None:
            return ()
        return self._cache.get(self.inputs, self.build)

    @property
    def is_ambient_occlusion(self):
        return True

    @property
    def is_gui_3d(self):
        return False


class LayerBaker(object):

    """
    Bakes flat layered item models from a host layer-model type.

    The host's `overrides` field is required: without it no model can be
    baked, so construction fails with CapabilityUnavailable. The hidden
    `build_quad` builder is optional: without it quads come from the public
    `quads_for_sprite`, keeping only front-facing ones.
    """

    def __init__(self, layer_cls, cache=None):
        self._cache = cache
        self._overrides = find_field_getter(layer_cls, 'overrides', required=True)
        self._build_quad = find_method(layer_cls, 'build_quad', required=False)
        self._quads_for_sprite = getattr(layer_cls, 'quads_for_sprite', None)
        # one bound method for every model, so equal models fingerprint equal
        self._builder = self._build
        if self._build_quad is None and self._quads_for_sprite is None:
            logger.warning('%s can not build quads, baked models will be empty', layer_cls.__name__)

    @property
    def fast(self):
        return self._build_quad is not None

    def _build(self, inputs):
        quads = []
        for index, sprite in enumerate(inputs.sprites):
            if self._build_quad is not None:
                quads.append(self._build_quad(inputs.format, inputs.transform, FRONT, sprite, index))
            elif self._quads_for_sprite is not None:
                for quad in self._quads_for_sprite(index, sprite, inputs.format, inputs.transform):
                    if getattr(quad, 'face', None) == FRONT:
                        quads.append(quad)
        return tuple(quads)

    def bake(self, parent, fmt, texture_getter, transform=None):
        textures = list(parent.textures)
        particle = texture_getter(textures[0] if textures else MISSING_TEXTURE)
        sprites = tuple(texture_getter(t) for t in textures)
        return LazyQuadModel(BakeInputs(sprites, fmt, transform), self._builder,
                             particle=particle, overrides=self._overrides(parent), cache=self._cache)
