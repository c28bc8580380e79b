from dataclasses import dataclass, field

import pytest

from modeldedup.config import Config
from modeldedup.keys import ResourceKey
from modeldedup.orchestrator import Orchestrator, Summary, wipe_descriptors


@dataclass
class Quad:
    vertices: list
    face: str


@dataclass
class BakedModel:
    quads: list
    particle: str


@dataclass
class MultipartModel:
    parts: list


@dataclass
class WrappedMultipart:
    parts: list

    @classmethod
    def wrap(cls, model):
        return cls(model.parts)


@dataclass
class VertexFormat:
    elements: list


class Broken(object):
    __dedup_fields__ = ('boom',)

    @property
    def boom(self):
        raise ValueError('boom')


def config(**kwargs):
    kwargs.setdefault('progress', False)
    return Config(**kwargs)


def stone():
    return BakedModel([Quad([0, 1, 2], 'up')], 'stone')


def test_equal_models_are_merged():
    k1 = ResourceKey('minecraft', 'stone', 'normal')
    k2 = ResourceKey('minecraft', 'cobblestone', 'normal')
    models = {k1: stone(), k2: stone()}
    first = models[k1]

    summary = Orchestrator(config()).run([ResourceKey('minecraft', 'stone')], {}, models)

    assert models[k1] is first
    assert models[k2] is first
    assert summary.successfuls == 4
    assert summary.trims == 0
    assert summary.failures == 0


def test_substructures_merge_across_roots():
    k1 = ResourceKey('mod', 'a', 'normal')
    k2 = ResourceKey('mod', 'b', 'normal')
    models = {k1: BakedModel([Quad([0, 1, 2], 'up')], 'a'), k2: BakedModel([Quad([0, 1, 2], 'up')], 'b')}

    summary = Orchestrator(config()).run([], {}, models)

    assert models[k1] is not models[k2]
    assert models[k1].quads is models[k2].quads
    assert summary.trims == 1


def test_descriptors_are_deduplicated_and_written_back():
    descriptors = {
        ResourceKey('mod', 'block/a'): {'textures': ['mod:a', 'mod:side']},
        ResourceKey('mod', 'block/b'): {'textures': ['mod:a', 'mod:side']},
    }
    a, b = descriptors.values()

    Orchestrator(config()).run([], descriptors, {})
    assert descriptors[ResourceKey('mod', 'block/b')] is a
    assert b is not a


def test_descriptor_pass_can_be_disabled():
    descriptors = {'mod:a': [[1]], 'mod:b': [[1]]}
    Orchestrator(config(deduplicate_descriptors=False)).run([], descriptors, {})
    assert descriptors['mod:a'] is not descriptors['mod:b']


def test_wipe_keeps_builtin_descriptors():
    keep = [ResourceKey('minecraft', 'builtin/generated'), ResourceKey('forge', 'item/generated')]
    drop = [ResourceKey('minecraft', 'block/stone'), ResourceKey('mod', 'builtin/x')]
    descriptors = dict((k, [k.path]) for k in keep + drop)

    Orchestrator(config(wipe_descriptor_cache=True)).run([], descriptors, {})
    assert sorted(descriptors, key=str) == sorted(keep, key=str)


def test_wipe_descriptors_accepts_string_keys():
    descriptors = {'minecraft:builtin/entity': 1, 'mod:block/a': 2}
    assert wipe_descriptors(descriptors) == 1
    assert list(descriptors) == ['minecraft:builtin/entity']


def test_static_roots_are_trimmed():
    f1 = VertexFormat([['position', 3], ['color', 4]])
    f2 = VertexFormat([['position', 3], ['uv', 2]])

    Orchestrator(config()).run([], {}, {}, vertex_formats=[f1, f2], stats=[])
    assert f1.elements[0] is f2.elements[0]


def test_replacement_hooks():
    key = ResourceKey('mod', 'fence', 'multipart')
    models = {key: MultipartModel([['post'], ['side']])}

    summary = Orchestrator(config(), replacements={MultipartModel: WrappedMultipart.wrap}).run([], {}, models)
    assert type(models[key]) is WrappedMultipart
    assert summary.successfuls == 1


def test_failing_replacement_keeps_the_model():
    def explode(model):
        raise RuntimeError('cannot wrap')

    fence = MultipartModel([['post']])
    models = {'mod:fence': fence, 'mod:a': [['x']], 'mod:b': [['x']]}

    summary = Orchestrator(config(), replacements={MultipartModel: explode}).run([], {}, models)
    assert models['mod:fence'] is fence
    assert models['mod:a'] is models['mod:b']
    assert summary.successfuls == 2


def test_failed_roots_do_not_stop_the_run():
    broken = Broken()
    models = {'mod:broken': broken, 'mod:a': [['x']], 'mod:b': [['x']]}

    summary = Orchestrator(config()).run([], {}, models)
    assert models['mod:broken'] is broken
    assert models['mod:a'] is models['mod:b']
    assert isinstance(summary, Summary)
    assert summary.failures == 1


def test_models_pass_can_be_disabled():
    models = {'mod:a': [['x']], 'mod:b': [['x']]}
    Orchestrator(config(deduplicate_models=False)).run([], {}, models)
    assert models['mod:a'] is not models['mod:b']


def test_disabled_does_nothing():
    models = {'mod:a': [['x']], 'mod:b': [['x']]}
    assert Orchestrator(config(deduplicate=False)).run([], {}, models) == Summary(0, 0, 0, 0)
    assert models['mod:a'] is not models['mod:b']


def test_step_every_larger_than_table():
    models = {'mod:a': [['x']], 'mod:b': [['x']], 'mod:c': [['x']]}
    Orchestrator(config(step_every=100)).run([], {}, models)
    assert models['mod:a'] is models['mod:c']


def test_recursion_level_is_passed_on():
    models = {'mod:a': [[['x']]], 'mod:b': [[['x']]]}
    summary = Orchestrator(config(max_recursion=0)).run([], {}, models)
    assert models['mod:a'] is not models['mod:b']
    assert summary.successfuls == 0


def test_dump_names(tmp_path):
    models = {
        ResourceKey('mod', 'fence', 'east=true'): [1],
        ResourceKey('mod', 'fence', 'east=false'): [1],
        ResourceKey('minecraft', 'stone', 'normal'): [1],
    }
    Orchestrator(config(dump_names=True, dump_dir=str(tmp_path), deduplicate=False)).run([], {}, models)

    names = (tmp_path / 'baked_model_names.txt').read_text().splitlines()
    assert names == ['minecraft:stone#normal', 'mod:fence#east=false', 'mod:fence#east=true']
    per_namespace = (tmp_path / 'baked_model_counts_per_namespace.txt').read_text().splitlines()
    assert per_namespace == ['mod: 2', 'minecraft: 1']
    per_block = (tmp_path / 'baked_model_counts_per_block.txt').read_text().splitlines()
    assert per_block == ['mod:fence: 2', 'minecraft:stone: 1']


@pytest.mark.parametrize('kwargs', [{'max_recursion': -1}, {'step_every': 0}])
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        Orchestrator(config(**kwargs)).run([], {}, {})
