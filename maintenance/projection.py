# ===========================================================
# maintenance/projection.py
# ===========================================================
"""
Projection rebuild engine.

A projection is a table derived from one or more source tables, with one
row per composite key. Rebuilding it diffs the keys the sources require
against the keys currently stored:

- required but missing   -> insert with the default payload
- stored but not required -> delete
- stored and required     -> left untouched, payload preserved

Duplicate stored rows for one key are reduced to the first row in
``current_ordering`` (most recently updated by default).

The read, the diff and the writes for every projection of one run happen
inside a single transaction. Concurrent writes to the same projection
during a run are not supported; callers hold a maintenance lock.
"""

import logging
from contextlib import ExitStack
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Tuple

from django.conf import settings
from django.db import DEFAULT_DB_ALIAS, DatabaseError

from .exceptions import MaintenanceError, PlanApplicationError
from .integrity import with_integrity_checks_suspended
from .unit_of_work import run_in_transaction

logger = logging.getLogger(__name__)


# ===========================================================
# Records, plans and summaries
# ===========================================================
@dataclass(frozen=True)
class SourceRecord:
    """A key required by the sources, plus whatever is needed to build its default row."""
    key: Tuple
    context: Any = field(default=None, compare=False)


@dataclass(frozen=True)
class DerivedRecord:
    """An existing projection row. Only its identity is read, never its payload."""
    pk: Any
    key: Tuple


@dataclass(frozen=True)
class RebuildSummary:
    inserted: int = 0
    deleted: int = 0
    unchanged: int = 0

    @property
    def is_noop(self):
        return not self.inserted and not self.deleted

    def as_dict(self):
        return {"inserted": self.inserted, "deleted": self.deleted, "unchanged": self.unchanged}

    def __str__(self):
        return f"inserted={self.inserted} deleted={self.deleted} unchanged={self.unchanged}"


@dataclass
class RebuildPlan:
    projection: str
    to_insert: List[SourceRecord] = field(default_factory=list)
    to_delete: List[DerivedRecord] = field(default_factory=list)
    unchanged: List[DerivedRecord] = field(default_factory=list)
    # Subset of to_delete: surplus rows sharing a key with a kept row.
    duplicates: List[DerivedRecord] = field(default_factory=list)

    @property
    def is_empty(self):
        return not self.to_insert and not self.to_delete

    def summary(self) -> RebuildSummary:
        return RebuildSummary(
            inserted=len(self.to_insert),
            deleted=len(self.to_delete),
            unchanged=len(self.unchanged),
        )

    def duplicates_only(self) -> "RebuildPlan":
        """Restrict the plan to removing duplicate rows; stale rows and missing keys are left alone."""
        duplicate_pks = {record.pk for record in self.duplicates}
        stale = [record for record in self.to_delete if record.pk not in duplicate_pks]
        return RebuildPlan(
            projection=self.projection,
            to_delete=list(self.duplicates),
            unchanged=self.unchanged + stale,
            duplicates=list(self.duplicates),
        )


def build_plan(name: str, sources: Iterable[SourceRecord], current: Iterable[DerivedRecord]) -> RebuildPlan:
    """
    Diff the required key set against the stored rows. Pure, no database access.

    A repeated stored key is a duplicate whether or not the sources still
    require it; the first row of each key is the one considered kept or stale.
    """
    required: Dict[Tuple, SourceRecord] = {}
    for source in sources:
        required.setdefault(tuple(source.key), source)

    plan = RebuildPlan(projection=name)
    seen = set()
    for record in current:
        key = tuple(record.key)
        if key in seen:
            plan.to_delete.append(record)
            plan.duplicates.append(record)
            continue
        seen.add(key)
        if key in required:
            plan.unchanged.append(record)
        else:
            plan.to_delete.append(record)

    plan.to_insert = [source for key, source in required.items() if key not in seen]
    return plan


# ===========================================================
# Projection definitions
# ===========================================================
class Projection:
    """
    Base class for a derived table keyed by ``key_fields``.

    Subclasses set ``name``, ``model`` and ``key_fields`` and implement
    ``sources()``; ``default_payload()`` supplies the non-key columns of
    newly inserted rows.
    """

    name: str = None
    model = None
    key_fields: Tuple[str, ...] = ()
    current_ordering: Tuple[str, ...] = ("-updated_at", "-pk")
    requires_integrity_guard = False

    def __init__(self, using=None, batch_size=None):
        self.using = using or DEFAULT_DB_ALIAS
        self.batch_size = batch_size or settings.MAINTENANCE["BATCH_SIZE"]

    def __repr__(self):
        return f"<{self.__class__.__name__} {self.name}@{self.using}>"

    def get_queryset(self):
        # _base_manager so soft-delete style default managers never hide rows.
        return self.model._base_manager.using(self.using)

    def sources(self) -> Iterable[SourceRecord]:
        raise NotImplementedError

    def default_payload(self, source: SourceRecord) -> dict:
        return {}

    def current(self) -> Iterable[DerivedRecord]:
        rows = (
            self.get_queryset()
            .order_by(*self.current_ordering)
            .values_list("pk", *self.key_fields)
        )
        for pk, *key in rows.iterator():
            yield DerivedRecord(pk=pk, key=tuple(key))

    def build_instance(self, source: SourceRecord):
        values = dict(zip(self.key_fields, source.key))
        values.update(self.default_payload(source))
        return self.model(**values)

    @property
    def table_names(self):
        return [self.model._meta.db_table]


class PurgeProjection(Projection):
    """
    A projection whose rows are all removed, except those ``retained()``
    selects. Keys are primary keys, so nothing is ever inserted.
    """

    key_fields = ()
    current_ordering = ("pk",)

    def retained(self):
        return self.get_queryset().none()

    def sources(self):
        for pk in self.retained().values_list("pk", flat=True).iterator():
            yield SourceRecord(key=(pk,))

    def current(self):
        for pk in self.get_queryset().order_by(*self.current_ordering).values_list("pk", flat=True).iterator():
            yield DerivedRecord(pk=pk, key=(pk,))


# ===========================================================
# Engine
# ===========================================================
def rebuild_projection(projection: Projection) -> RebuildPlan:
    """Snapshot the sources and the projection and compute the plan."""
    plan = build_plan(projection.name, projection.sources(), projection.current())
    logger.info(
        f"[{projection.name}] Planned insert={len(plan.to_insert)} "
        f"delete={len(plan.to_delete)} (duplicates={len(plan.duplicates)}) "
        f"unchanged={len(plan.unchanged)}"
    )
    return plan


def _chunks(items, size):
    for start in range(0, len(items), size):
        yield items[start:start + size]


def apply_plan(projection: Projection, plan: RebuildPlan) -> RebuildSummary:
    """
    Delete, then insert. Must run inside a transaction; any failure is
    raised as PlanApplicationError so the caller's transaction rolls back.
    """
    label = projection.model._meta.label
    deleted = 0
    inserted = 0
    try:
        pks = [record.pk for record in plan.to_delete]
        for chunk in _chunks(pks, projection.batch_size):
            _, per_model = projection.get_queryset().filter(pk__in=chunk).delete()
            deleted += per_model.get(label, 0)

        for chunk in _chunks(plan.to_insert, projection.batch_size):
            instances = [projection.build_instance(source) for source in chunk]
            inserted += len(projection.get_queryset().bulk_create(instances))
    except MaintenanceError:
        raise
    except Exception as exc:
        logger.error(f"[{plan.projection}] Plan application failed: {exc.__class__.__name__}: {exc}")
        raise PlanApplicationError(
            f"Applying plan for '{plan.projection}' failed: {exc}",
            projection=plan.projection,
        ) from exc

    if deleted != len(plan.to_delete):
        logger.warning(
            f"[{plan.projection}] Expected to delete {len(plan.to_delete)} rows, deleted {deleted}"
        )

    summary = RebuildSummary(inserted=inserted, deleted=deleted, unchanged=len(plan.unchanged))
    logger.info(f"[{plan.projection}] Applied {summary}")
    return summary


def rebuild(projections, dry_run=False, plan_filter=None, label="rebuild") -> Dict[str, RebuildSummary]:
    """
    Rebuild every projection in one unit of work and return a summary per
    projection name, in order.

    The integrity guard is opened inside the transaction when any projection
    asks for it. ``plan_filter`` may narrow each plan before it is applied.
    With ``dry_run`` the plans are computed and nothing is written.
    """
    projections = list(projections)
    if not projections:
        return {}

    aliases = {projection.using for projection in projections}
    if len(aliases) != 1:
        raise ValueError(f"Projections of one rebuild must share a database, got {sorted(aliases)}")
    alias = aliases.pop()

    guarded = not dry_run and any(p.requires_integrity_guard for p in projections)
    table_names = [name for p in projections for name in p.table_names]

    def work():
        summaries = {}
        with ExitStack() as stack:
            if guarded:
                stack.enter_context(with_integrity_checks_suspended(alias, table_names=table_names))
            for projection in projections:
                plan = rebuild_projection(projection)
                if plan_filter is not None:
                    plan = plan_filter(plan)
                summaries[projection.name] = plan.summary() if dry_run else apply_plan(projection, plan)
        return summaries

    try:
        return run_in_transaction(work, using=alias, rollback=dry_run, label=label)
    except DatabaseError as exc:
        # Raised outside apply_plan: deferred constraint checks at commit or
        # on guard exit.
        raise PlanApplicationError(f"{label} failed: {exc}") from exc
