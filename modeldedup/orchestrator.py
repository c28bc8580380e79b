import logging
from collections import namedtuple

from tqdm import tqdm

from modeldedup.config import Config
from modeldedup.deduplicator import Deduplicator
from modeldedup.dump import dump_key_reports
from modeldedup.keys import ResourceKey

logger = logging.getLogger(__name__)


Summary = namedtuple('Summary', ('successfuls', 'trims', 'failures', 'eliminated'))


def wipe_descriptors(descriptors):
    """Drops every descriptor which is not a builtin one. Returns the number removed."""
    before = len(descriptors)
    for key in [k for k in descriptors if not ResourceKey.of(k).is_builtin]:
        del descriptors[key]
    return before - len(descriptors)


class Orchestrator(object):

    """
    Runs a Deduplicator over the host's registries.

    All roots share one index, so equal substructures found under different
    roots are merged too. Roots are visited in a fixed order: static vertex
    formats, descriptors, statistics, then baked models, each collection in
    its own iteration order. The first structurally equal object seen wins.

    `replacements` maps an exact baked-model type to a factory which wraps
    such models before they are deduplicated.
    """

    def __init__(self, config=None, rules=None, replacements=None):
        self.config = Config() if config is None else config
        self.rules = rules
        self.replacements = dict(replacements or {})
        self.deduplicator = None

    def _root(self, name, node):
        """Deduplicates one root. Any failure is logged and the root returned as it was."""
        try:
            return self.deduplicator.deduplicate(node)
        except Exception:
            logger.exception('Failed to deduplicate %s', name)
            return node

    def _keys(self, keys):
        try:
            self.deduplicator.add_keys(keys)
        except Exception:
            logger.exception('Failed to intern resource keys')

    def _replace(self, key, model, factory):
        """Wraps one model. On failure the model is kept and nothing is counted."""
        try:
            replacement = factory(model)
        except Exception:
            logger.exception('Failed to replace model %s', key)
            return model
        self.deduplicator.index.record_full_replacement(model)
        return replacement

    def _static(self, name, roots):
        try:
            for root in roots:
                self._root(name, root)
        except Exception:
            logger.exception('Skipping %s', name)

    def run(self, resource_keys, descriptors, models, vertex_formats=(), stats=()):
        """
        Deduplicates everything reachable from the given roots.

        `descriptors` and `models` are mutable mappings; roots which get
        replaced as a whole are written back into them.
        """
        config = self.config.validate()

        if config.dump_names:
            dump_key_reports(list(models.keys()), config.dump_dir)

        if config.wipe_descriptor_cache:
            logger.info('Clearing descriptor cache (%d items)...', len(descriptors))
            logger.info('Cleared %d objects.', wipe_descriptors(descriptors))
            descriptors = {}

        if not config.deduplicate:
            return Summary(0, 0, 0, 0)

        self.deduplicator = Deduplicator(rules=self.rules, max_recursion=config.max_recursion)
        self._keys(resource_keys)

        logger.info('Deduplicating...')
        length = 2 + (len(descriptors) if config.deduplicate_descriptors else 0)
        with tqdm(total=length, unit=' roots', desc='Deduplicating', disable=not config.progress) as bar:
            bar.set_postfix_str('Vertex formats')
            self._static('vertex formats', vertex_formats)
            bar.update(1)

            if config.deduplicate_descriptors:
                for key in list(descriptors.keys()):
                    bar.set_postfix_str(str(key))
                    self._keys([key])
                    descriptors[key] = self._root(key, descriptors[key])
                    bar.update(1)

            bar.set_postfix_str('Stats')
            self._static('stats', stats)
            bar.update(1)

        if config.deduplicate_models:
            self._models(models)

        d = self.deduplicator
        logger.info('Deduplicated %d (+ %d) objects.', d.successfuls, d.successful_trims)
        for name, count in d.index.stats():
            logger.debug('%s = %d', name, count)
        return Summary(d.successfuls, d.successful_trims, d.failures, d.index.eliminated)

    def _models(self, models):
        step_every = self.config.step_every
        keys = list(models.keys())
        step_count = (len(keys) + step_every - 1) // step_every

        logger.info('Deduplicating models...')
        with tqdm(total=step_count, unit=' steps', desc='Deduplicating models', disable=not self.config.progress) as bar:
            for n, key in enumerate(keys):
                if step_every == 1 or n % step_every == 0:
                    bar.set_postfix_str(str(key))
                    bar.update(1)

                model = models[key]
                factory = self.replacements.get(type(model))
                if factory is not None:
                    model = self._replace(key, model, factory)
                    models[key] = model

                self._keys([key])
                models[key] = self._root(key, model)
