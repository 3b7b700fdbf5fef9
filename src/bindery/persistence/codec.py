"""Persistence codec: snapshot bindings to a PersistedGraph and rebind on load.

Usage:
    codec = PersistenceCodec(catalog, registry, binding)
    graph = codec.save()
    ...
    report = codec.load(graph, spawner)
"""

from __future__ import annotations

import logging
import uuid
from typing import Any, Protocol

from bindery.binding import ObjectState, ReflectionBinding
from bindery.core.catalog import TypeCatalog, TypeDescriptor
from bindery.core.catalog.values import decode_value, encode_value
from bindery.core.errors import ApplyError, ConflictError, DecodeError, UnknownTypeError
from bindery.core.identity import DurableId, LiveHandle
from bindery.persistence.models import LoadFailure, LoadReport, PersistedEntry, PersistedGraph
from bindery.registry import IdentityRegistry

logger = logging.getLogger(__name__)


class Spawner(Protocol):
    """Creates and discards host objects on behalf of the codec."""

    def create(self, type_tag: str) -> LiveHandle:
        """Construct a fresh default object without registering it."""
        ...

    def discard(self, handle: LiveHandle) -> None:
        """Destroy an object created by ``create`` that could not be bound."""
        ...


class PersistenceCodec:
    """Converts between live bindings and the persisted graph form.

    Args:
        catalog: Type catalog used to encode and decode field values.
        registry: Identity registry to snapshot and rebind.
        binding: Reflection binding used to read state and replay fields.
    """

    def __init__(
        self,
        catalog: TypeCatalog,
        registry: IdentityRegistry,
        binding: ReflectionBinding,
    ):
        self._catalog = catalog
        self._registry = registry
        self._binding = binding

    # Save

    def save(self) -> PersistedGraph:
        """Snapshot every bound and grace-period orphaned persistent object.

        Orphans are written from the state captured when they were detached.
        Entries are ordered by id so successive saves diff cleanly.

        Returns:
            Detached, immutable graph.
        """
        entries: list[PersistedEntry] = []
        for durable_id, _ in self._registry.bindings():
            if not self._binding.is_bound(durable_id):
                continue
            entry = self._encode(durable_id, self._binding.capture(durable_id))
            if entry is not None:
                entries.append(entry)

        for record in self._registry.orphans(within_grace=True):
            state = self._binding.last_known(record.durable_id)
            if state is None:
                continue
            entry = self._encode(record.durable_id, state)
            if entry is not None:
                entries.append(entry)

        entries.sort(key=lambda e: e.id)
        logger.debug("snapshotted %d entries", len(entries))
        return PersistedGraph(entries=tuple(entries))

    def _encode(self, durable_id: DurableId, state: ObjectState) -> PersistedEntry | None:
        try:
            descriptor = self._catalog.descriptor_of(state.type_tag)
        except UnknownTypeError:
            logger.warning("not saving %s: type %s is not a root type", durable_id, state.type_tag)
            return None
        if not descriptor.persistent:
            return None
        return PersistedEntry(
            id=str(durable_id),
            type=descriptor.tag,
            type_id=str(descriptor.type_id),
            fields={
                f.name: encode_value(f.spec, state.values[f.name])
                for f in descriptor.persisted_fields()
            },
        )

    # Load

    def load(self, graph: PersistedGraph, spawner: Spawner) -> LoadReport:
        """Recreate persisted objects and rebind them to their durable ids.

        Each entry is decoded before anything is created, then a fresh object
        is spawned, rebound and its fields replayed without journaling.
        Failing entries are skipped and reported; the rest still load.

        Args:
            graph: Graph to load.
            spawner: Creates fresh host objects by type tag.

        Returns:
            Report of loaded ids and skipped entries.
        """
        report = LoadReport()
        for entry in graph.entries:
            try:
                durable_id, descriptor, values = self._decode(entry)
            except DecodeError as e:
                self._fail(report, entry, e)
                continue

            try:
                handle = spawner.create(descriptor.tag)
            except Exception as e:
                # Host construction failures are per entry, like decode failures.
                self._fail(report, entry, e)
                continue

            try:
                self._registry.rebind(durable_id, handle)
            except ConflictError as e:
                spawner.discard(handle)
                self._fail(report, entry, e)
                continue

            try:
                for name, value in values.items():
                    self._binding.apply(durable_id, name, value, replay=True)
            except ApplyError as e:
                self._registry.unbind(handle)
                spawner.discard(handle)
                self._fail(report, entry, e)
                continue

            self._binding.forget([durable_id])
            report.loaded.append(durable_id)

        logger.info(
            "loaded %d of %d entries (%d skipped)",
            len(report.loaded),
            len(graph.entries),
            len(report.failures),
        )
        return report

    def _decode(self, entry: PersistedEntry) -> tuple[DurableId, TypeDescriptor, dict[str, Any]]:
        try:
            durable_id = DurableId.parse(entry.id)
        except ValueError as e:
            raise DecodeError(f"Malformed durable id {entry.id!r}") from e

        descriptor = self._lookup(entry)
        persisted = {f.name: f for f in descriptor.persisted_fields()}
        unknown = set(entry.fields) - set(persisted)
        if unknown:
            raise DecodeError(f"{descriptor.tag} has no persisted fields {sorted(unknown)}")

        values = {
            name: decode_value(persisted[name].spec, raw, name)
            for name, raw in entry.fields.items()
        }
        return durable_id, descriptor, values

    def _lookup(self, entry: PersistedEntry) -> TypeDescriptor:
        try:
            return self._catalog.descriptor_of(entry.type)
        except UnknownTypeError:
            # Renamed types are still found by their stable id.
            if entry.type_id is not None:
                try:
                    descriptor = self._catalog.by_type_id(uuid.UUID(entry.type_id))
                except ValueError:
                    descriptor = None
                if descriptor is not None:
                    return descriptor
            raise

    def _fail(self, report: LoadReport, entry: PersistedEntry, error: Exception) -> None:
        logger.warning("skipping entry %s (%s): %s", entry.id, entry.type, error)
        report.failures.append(
            LoadFailure(entry_id=entry.id, type_tag=entry.type, reason=str(error))
        )
