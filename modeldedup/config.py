from dataclasses import dataclass


@dataclass
class Config:
    """Options recognized by the orchestrator and the command line."""

    # how many edges below each root are followed
    max_recursion: int = 6
    # master switch for all deduplication
    deduplicate: bool = True
    # per-model pass over the baked-model table
    deduplicate_models: bool = True
    # pass over the unbaked descriptor cache
    deduplicate_descriptors: bool = True
    # drop non-builtin descriptors instead of deduplicating them
    wipe_descriptor_cache: bool = False
    # baked models per progress tick
    step_every: int = 1
    dump_names: bool = False
    dump_dir: str = '.'
    progress: bool = True

    def validate(self):
        if self.max_recursion < 0:
            raise ValueError('max_recursion must be >= 0, got {:d}'.format(self.max_recursion))
        if self.step_every < 1:
            raise ValueError('step_every must be >= 1, got {:d}'.format(self.step_every))
        return self

    @classmethod
    def from_args(cls, args):
        return cls(
            max_recursion=args.recursion,
            deduplicate=not args.no_dedup,
            deduplicate_models=not args.no_models,
            deduplicate_descriptors=not args.no_descriptors,
            wipe_descriptor_cache=args.wipe_cache,
            step_every=args.step_every,
            dump_names=args.dump is not None,
            dump_dir=str(args.dump) if args.dump is not None else '.',
            progress=not args.no_progress,
        ).validate()
