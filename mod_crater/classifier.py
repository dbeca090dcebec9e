"""Classification engine: fixpoint reachability over the mod catalog.

Pure computation, no I/O. Every mod name ends up in exactly one of:

* working    -- baseline, or all required dependencies are working
* deprecated -- flagged deprecated by the portal (baseline names excepted)
* broken     -- a required dependency is deprecated or broken
* typo       -- a required dependency names a mod that does not exist
* pending    -- residual after the fixpoint; a cycle or an input defect

Passes repeat until one moves nothing. Termination is guaranteed because every
pass either shrinks ``pending`` or ends the loop.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass

import structlog

from mod_crater.exceptions import InvalidInputError
from mod_crater.models import BrokenMod, ClassificationResult, ModRecord, TypoMod

log = structlog.get_logger("mod_crater.classifier")


@dataclass(frozen=True)
class PassSnapshot:
    """State of every bucket right after one pass."""

    pass_number: int
    moved: int
    working: frozenset[str]
    deprecated: frozenset[str]
    broken: frozenset[str]
    typo: frozenset[str]
    pending: frozenset[str]


PassObserver = Callable[[PassSnapshot], None]


def validate_records(records: Mapping[str, ModRecord]) -> None:
    """Raise :class:`InvalidInputError` on a required dependency without a target."""
    for name in sorted(records):
        for dep in records[name].dependencies:
            if dep.is_required and not dep.target_name:
                raise InvalidInputError(name, dep.original_text)


def classify(
    records: Mapping[str, ModRecord],
    baseline: Iterable[str],
    *,
    on_pass: PassObserver | None = None,
) -> ClassificationResult:
    """Partition every mod in *records* (plus the *baseline* names).

    Parameters
    ----------
    records:
        ``name -> ModRecord`` for the selected release of every mod.
    baseline:
        Names that are always working, whether or not they appear in
        *records* and regardless of their deprecated flag.
    on_pass:
        Optional observer called after each pass with a :class:`PassSnapshot`.

    Raises
    ------
    InvalidInputError
        A record has a required dependency with an empty target name.
    """
    validate_records(records)

    baseline_set = frozenset(baseline)
    working: set[str] = set(baseline_set)
    deprecated: set[str] = {
        name for name, m in records.items() if m.deprecated and name not in baseline_set
    }
    pending: set[str] = set(records) - deprecated - baseline_set
    broken: dict[str, tuple[str, ...]] = {}
    typo: dict[str, str] = {}

    def is_known(name: str) -> bool:
        return name in records or name in baseline_set

    def is_dead(name: str) -> bool:
        return name in deprecated or name in broken

    passes = 0
    while True:
        passes += 1
        moved = 0
        for name in sorted(pending):
            req = records[name].required_dependencies()

            if all(d.target_name in working for d in req):
                working.add(name)
            elif missing := next((d for d in req if not is_known(d.target_name)), None):
                typo[name] = missing.target_name
            elif any(is_dead(d.target_name) for d in req):
                broken[name] = tuple(
                    dict.fromkeys(d.target_name for d in req if is_dead(d.target_name))
                )
            else:
                continue
            pending.discard(name)
            moved += 1

        log.debug("classifier.pass", number=passes, moved=moved, pending=len(pending))
        if on_pass is not None:
            on_pass(
                PassSnapshot(
                    pass_number=passes,
                    moved=moved,
                    working=frozenset(working),
                    deprecated=frozenset(deprecated),
                    broken=frozenset(broken),
                    typo=frozenset(typo),
                    pending=frozenset(pending),
                )
            )
        if moved == 0:
            break

    result = ClassificationResult(
        working=tuple(sorted(working)),
        deprecated=tuple(sorted(deprecated)),
        broken=tuple(BrokenMod(n, broken[n]) for n in sorted(broken)),
        typo=tuple(TypoMod(n, typo[n]) for n in sorted(typo)),
        pending=tuple(sorted(pending)),
        passes=passes,
    )
    log.info("classifier.done", passes=passes, **result.counts())
    if result.stuck:
        log.warning("classifier.stuck", residual=list(result.pending))
    return result
