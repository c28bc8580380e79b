from modeldedup.deduplicator import Deduplicator
from modeldedup.lazycache import LazyCache
from modeldedup.orchestrator import Orchestrator
