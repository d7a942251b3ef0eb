"""Challenge catalog loading.

The catalog is static data: an id, a title, the requirement list the
submission is graded against, the submission kind and the XP it is worth.
It is read from YAML; the built-in catalog ships with the package.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import yaml

from codekata_core.scoring import SubmissionKind

BUILTIN_CATALOG = Path(__file__).parent / "catalog" / "challenges.yml"


@dataclass(frozen=True)
class Challenge:
    id: str
    title: str
    requirements: tuple[str, ...]
    kind: SubmissionKind = SubmissionKind.STANDARD
    xp: int = 100


def _from_dict(d: dict, index: int) -> Challenge:
    if not isinstance(d, dict):
        raise ValueError(f"Challenge #{index} is not a mapping.")
    challenge_id = d.get("id")
    requirements = d.get("requirements")
    if not challenge_id:
        raise ValueError(f"Challenge #{index} has no id.")
    if not isinstance(requirements, list) or not requirements:
        raise ValueError(f"Challenge {challenge_id!r} has no requirements.")
    try:
        kind = SubmissionKind(d.get("kind", SubmissionKind.STANDARD.value))
    except ValueError:
        raise ValueError(f"Challenge {challenge_id!r} has unknown kind {d.get('kind')!r}.")
    return Challenge(
        id=str(challenge_id),
        title=d.get("title") or str(challenge_id),
        requirements=tuple(str(r) for r in requirements),
        kind=kind,
        xp=int(d.get("xp", 100)),
    )


def load_challenges(path: str | None = None) -> list[Challenge]:
    """Load the challenge catalog from ``path``, or the built-in one if None."""
    p = Path(path) if path else BUILTIN_CATALOG
    if not p.exists():
        raise FileNotFoundError(f"Challenge catalog not found: {p}")
    with open(p, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    if isinstance(data, dict):
        data = data.get("challenges", [])
    challenges = [_from_dict(d, i) for i, d in enumerate(data, 1)]

    seen: set[str] = set()
    for c in challenges:
        if c.id in seen:
            raise ValueError(f"Duplicate challenge id {c.id!r} in {p}")
        seen.add(c.id)
    return challenges


def get_challenge(challenges: list[Challenge], challenge_id: str) -> Challenge | None:
    return next((c for c in challenges if c.id == challenge_id), None)
