"""Module loading and the process-wide module cache.

Each canonical identity is evaluated at most once per process. The first caller
claims the cache entry, evaluates the file, and then either publishes the value
or evicts the entry so a later attempt can retry. Other threads asking for the
same identity wait for the claim to settle and reuse its value. A wait that would
close a loop of loads, in one thread or across threads, is a cycle.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Dict, Optional, Tuple

from core.config import LoaderConfig
from core.errors import CyclicLoadError, EvaluationError, HostError, ResolutionError
from core.exports import ModuleScope, select_export
from core.ports import FileSystemPort, ScriptRuntimePort, TranspilerPort
from core.resolver import ModuleResolver

LOGGER = logging.getLogger(__name__)


@dataclass
class ModuleRecord:
    """Cache entry for one canonical identity."""

    identity: str
    value: Any = None
    loading: bool = True
    failed: bool = False
    owner: Optional[int] = None
    ready: threading.Event = field(default_factory=threading.Event, repr=False)


class ModuleCache:
    """Identity-keyed module records shared by every loader in the process."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._records: Dict[str, ModuleRecord] = {}
        # Thread id -> the record that thread is blocked on.
        self._waiting: Dict[int, ModuleRecord] = {}

    def claim(self, identity: str) -> Tuple[ModuleRecord, bool]:
        """Return the record for an identity and whether the caller now owns its load."""

        with self._lock:
            record = self._records.get(identity)
            if record is not None:
                return record, False
            record = ModuleRecord(identity=identity, owner=threading.get_ident())
            self._records[identity] = record
            return record, True

    def _waits_on_itself(self, record: ModuleRecord, thread_id: int) -> bool:
        # Follow owner -> record-it-waits-on links; reaching thread_id is a cycle.
        owner = record.owner
        seen = set()
        while owner is not None and owner not in seen:
            if owner == thread_id:
                return True
            seen.add(owner)
            blocked_on = self._waiting.get(owner)
            if blocked_on is None or not blocked_on.loading:
                return False
            owner = blocked_on.owner
        return False

    def wait(self, record: ModuleRecord) -> None:
        """Block until another load of the record settles.

        Raises CyclicLoadError when waiting would close a loop of loads, either
        within the calling thread or across threads waiting on each other.
        """

        thread_id = threading.get_ident()
        with self._lock:
            if not record.loading:
                return
            if self._waits_on_itself(record, thread_id):
                raise CyclicLoadError(record.identity)
            self._waiting[thread_id] = record
        try:
            record.ready.wait()
        finally:
            with self._lock:
                self._waiting.pop(thread_id, None)

    def complete(self, record: ModuleRecord, value: Any) -> None:
        with self._lock:
            record.value = value
            record.loading = False
            record.owner = None
        record.ready.set()

    def evict(self, record: ModuleRecord) -> None:
        with self._lock:
            if self._records.get(record.identity) is record:
                del self._records[record.identity]
            record.loading = False
            record.failed = True
            record.owner = None
        record.ready.set()

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._records

    def __len__(self) -> int:
        with self._lock:
            return len(self._records)


# Lives for the whole host process; never persisted.
MODULE_CACHE = ModuleCache()


class ModuleLoader:
    """Load modules by canonical identity and hand back their export value."""

    def __init__(
        self,
        filesystem: FileSystemPort,
        runtime: ScriptRuntimePort,
        transpiler: Optional[TranspilerPort] = None,
        config: Optional[LoaderConfig] = None,
        cache: Optional[ModuleCache] = None,
    ) -> None:
        self._filesystem = filesystem
        self._runtime = runtime
        self._transpiler = transpiler
        self._config = config or LoaderConfig()
        self.cache = cache if cache is not None else MODULE_CACHE

    def resolver_for(self, package_root: str) -> ModuleResolver:
        """Build a resolver for one extension package using this loader's settings."""

        return ModuleResolver(
            self._filesystem,
            package_root,
            repository_root=self._config.repository_root,
            suffixes=self._config.suffixes,
        )

    def require(self, reference: str, issuer: Optional[str] = None, *, resolver: ModuleResolver) -> Any:
        """Resolve a reference from the issuing file and load it."""

        identity = resolver.resolve(reference, issuer)
        return self.load(identity, resolver)

    def load(self, identity: str, resolver: ModuleResolver) -> Any:
        """Return the export value of a module, evaluating it on first use."""

        while True:
            record, owner = self.cache.claim(identity)
            if owner:
                break
            self.cache.wait(record)
            if record.failed:
                # The claiming load failed and evicted the entry; try again.
                continue
            LOGGER.debug("Module cache hit: %s", identity)
            return record.value

        try:
            value = self._evaluate(identity, resolver)
        except HostError:
            self.cache.evict(record)
            raise
        except (Exception, SystemExit) as exc:
            # Module code calling exit() must not take the host down with it.
            self.cache.evict(record)
            raise EvaluationError(identity, str(exc) or type(exc).__name__) from exc
        except BaseException:
            self.cache.evict(record)
            raise

        self.cache.complete(record, value)
        LOGGER.info("Loaded module %s", identity)
        return value

    def _evaluate(self, identity: str, resolver: ModuleResolver) -> Any:
        raw = self._filesystem.read(identity)
        if raw is None:
            raise ResolutionError(identity, None)
        source = raw.decode("utf-8")
        suffix = os.path.splitext(identity)[1]

        # Data files bypass evaluation and export detection entirely.
        if suffix in self._config.data_suffixes:
            return json.loads(source)

        if suffix in self._config.typed_suffixes:
            if self._transpiler is None:
                raise EvaluationError(identity, "no transpiler configured for typed sources")
            source = self._transpiler.transpile(source, identity)

        scope = ModuleScope(identity, partial(self.require, issuer=identity, resolver=resolver))
        self._runtime.run(source, scope)
        return select_export(scope).value
