"""Core data types: dependency descriptors, mod records and classification results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class DependencyRelation(Enum):
    """How a mod relates to one of its declared dependencies.

    Only ``REQUIRED`` gates classification; the others are carried for
    reporting.
    """

    HIDDEN_OPTIONAL = "hidden-optional"
    INCOMPATIBLE = "incompatible"
    OPTIONAL = "optional"
    LOAD_ORDER_INDEPENDENT = "load-order-independent"
    REQUIRED = "required"


class Status(Enum):
    """Bucket a mod name ends up in after classification."""

    WORKING = "working"
    DEPRECATED = "deprecated"
    BROKEN = "broken"
    TYPO = "typo"
    PENDING = "pending"


@dataclass(frozen=True)
class DependencyDescriptor:
    """A single parsed dependency declaration of a release."""

    original_text: str
    relation: DependencyRelation = DependencyRelation.REQUIRED
    target_name: str = ""
    version_constraint: str = ""  # empty when unconstrained

    @property
    def is_required(self) -> bool:
        return self.relation is DependencyRelation.REQUIRED


@dataclass(frozen=True)
class ModRecord:
    """
    Normalized facts about the currently published release of one mod.
    Built by the catalog loader, never mutated by the classifier.
    """

    name: str
    deprecated: bool = False
    platform_version: str = ""  # e.g. "1.1", "2.0"; compared as a plain string
    dependencies: tuple[DependencyDescriptor, ...] = ()
    mod_version: str = ""

    def required_dependencies(self) -> list[DependencyDescriptor]:
        """Required dependencies in declaration order."""
        return [d for d in self.dependencies if d.is_required]


@dataclass(frozen=True)
class BrokenMod:
    """A mod with at least one required dependency that is deprecated or broken."""

    name: str
    causes: tuple[str, ...]  # direct causes only


@dataclass(frozen=True)
class TypoMod:
    """A mod requiring a name that exists neither in the catalog nor the baseline."""

    name: str
    offending_name: str


@dataclass(frozen=True)
class ClassificationResult:
    """
    Partition of every input name into five disjoint buckets.
    All buckets are sorted by name. ``pending`` is the residual left after the
    fixpoint: non-empty means a dependency cycle or an input defect.
    """

    working: tuple[str, ...] = ()
    deprecated: tuple[str, ...] = ()
    broken: tuple[BrokenMod, ...] = ()
    typo: tuple[TypoMod, ...] = ()
    pending: tuple[str, ...] = ()
    passes: int = 0
    _index: dict[str, Status] = field(
        default_factory=dict, init=False, repr=False, compare=False
    )

    def __post_init__(self) -> None:
        index = self._index
        for name in self.working:
            index[name] = Status.WORKING
        for name in self.deprecated:
            index[name] = Status.DEPRECATED
        for b in self.broken:
            index[b.name] = Status.BROKEN
        for t in self.typo:
            index[t.name] = Status.TYPO
        for name in self.pending:
            index[name] = Status.PENDING

    @property
    def stuck(self) -> bool:
        """True when the fixpoint halted with unresolved names."""
        return bool(self.pending)

    def status(self, name: str) -> Status | None:
        return self._index.get(name)

    def broken_causes(self, name: str) -> tuple[str, ...] | None:
        for b in self.broken:
            if b.name == name:
                return b.causes
        return None

    def typo_target(self, name: str) -> str | None:
        for t in self.typo:
            if t.name == name:
                return t.offending_name
        return None

    def all_names(self) -> set[str]:
        return set(self._index)

    def counts(self) -> dict[str, int]:
        return {
            Status.WORKING.value: len(self.working),
            Status.DEPRECATED.value: len(self.deprecated),
            Status.BROKEN.value: len(self.broken),
            Status.TYPO.value: len(self.typo),
            Status.PENDING.value: len(self.pending),
        }

    def to_dict(self) -> dict:
        """Plain JSON-serialisable view for external writers."""
        return {
            "working": list(self.working),
            "deprecated": list(self.deprecated),
            "broken": {b.name: list(b.causes) for b in self.broken},
            "typo": {t.name: t.offending_name for t in self.typo},
            "pending": list(self.pending),
            "passes": self.passes,
        }
