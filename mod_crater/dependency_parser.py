"""Parse mod portal dependency strings into descriptors.

Grammar of one declaration::

    [prefix] name [constraint]

``prefix`` is one of ``(?)``, ``!``, ``?``, ``~`` (checked in that order, so a
hidden-optional ``(?)`` is never read as optional ``?``). The constraint starts
at the first ``<``, ``=`` or ``>`` and is kept as one opaque token, e.g.
``">= 1.0"``.
"""

from __future__ import annotations

import re
from collections.abc import Sequence

from mod_crater.models import DependencyDescriptor, DependencyRelation

# Order matters: first match wins.
RELATION_PREFIXES: tuple[tuple[str, DependencyRelation], ...] = (
    ("(?)", DependencyRelation.HIDDEN_OPTIONAL),
    ("!", DependencyRelation.INCOMPATIBLE),
    ("?", DependencyRelation.OPTIONAL),
    ("~", DependencyRelation.LOAD_ORDER_INDEPENDENT),
)

_CONSTRAINT_START_RE = re.compile(r"[<=>]")


def parse_dependency(raw: str) -> DependencyDescriptor:
    """Parse a single dependency declaration.

    Never raises: a string without a recognised prefix is ``REQUIRED`` and a
    string without a constraint character has an empty constraint.
    """
    text = raw.strip()
    relation = DependencyRelation.REQUIRED
    for prefix, candidate in RELATION_PREFIXES:
        if text.startswith(prefix):
            text = text[len(prefix):].strip()
            relation = candidate
            break

    m = _CONSTRAINT_START_RE.search(text)
    idx = m.start() if m else len(text)
    return DependencyDescriptor(
        original_text=raw,
        relation=relation,
        target_name=text[:idx].strip(),
        version_constraint=text[idx:].strip(),
    )


def parse_dependencies(raw: str | Sequence[str] | None) -> list[DependencyDescriptor]:
    """Parse the ``dependencies`` field of a release.

    The portal sends either a single string or a list of strings.
    """
    if raw is None:
        return []
    if isinstance(raw, str):
        return [parse_dependency(raw)]
    return [parse_dependency(item) for item in raw]
