"""
Target resolution for reports.

Maps a (kind, id) reference onto the mirrored entity tables and answers two
questions: does the entity exist, and which user is responsible for it.
Dispatch is a lookup table keyed by target kind; each entry names the table,
its primary key and the column holding the responsible user.

Read-only. Content effects (hide/delete) live in the action dispatcher.
"""

from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from trust_engine.config import TargetKind
from trust_engine.core.exceptions import TargetNotFoundError
from trust_engine.models.content import Candidates, Comments, Messages, Posts
from trust_engine.models.user import Users


@dataclass(frozen=True)
class TargetSpec:
    """Where a target kind lives and how to find its responsible user."""

    model: type[SQLModel]
    id_column: str
    owner_column: str | None
    hideable: bool


TARGETS: dict[TargetKind, TargetSpec] = {
    TargetKind.POST: TargetSpec(Posts, "post_id", "author_id", hideable=True),
    TargetKind.COMMENT: TargetSpec(Comments, "comment_id", "user_id", hideable=True),
    TargetKind.MESSAGE: TargetSpec(Messages, "message_id", "sender_id", hideable=True),
    TargetKind.CANDIDATE: TargetSpec(Candidates, "candidate_id", "user_id", hideable=False),
    # A user is responsible for themself
    TargetKind.USER: TargetSpec(Users, "user_id", "user_id", hideable=False),
}


@dataclass(frozen=True)
class TargetDescriptor:
    """Minimal view of a resolved target."""

    kind: TargetKind
    target_id: int
    owner_id: int | None
    is_hidden: bool = False

    @property
    def supports_content_effects(self) -> bool:
        return TARGETS[self.kind].hideable


def target_spec(kind: TargetKind) -> TargetSpec:
    return TARGETS[TargetKind(kind)]


async def resolve_target(
    db: AsyncSession, kind: TargetKind, target_id: int
) -> TargetDescriptor | None:
    """
    Look up a target.

    Returns:
        A descriptor, or None if the entity does not exist.
    """
    spec = target_spec(kind)
    id_col = getattr(spec.model, spec.id_column)
    columns = [id_col.label("id")]
    if spec.owner_column:
        columns.append(getattr(spec.model, spec.owner_column).label("owner_id"))
    if spec.hideable:
        columns.append(spec.model.is_hidden.label("is_hidden"))  # type: ignore[attr-defined]

    result = await db.execute(select(*columns).where(id_col == target_id))
    row = result.mappings().first()
    if row is None:
        return None

    return TargetDescriptor(
        kind=TargetKind(kind),
        target_id=target_id,
        owner_id=row.get("owner_id"),
        is_hidden=bool(row.get("is_hidden", False)),
    )


async def require_target(db: AsyncSession, kind: TargetKind, target_id: int) -> TargetDescriptor:
    """Like resolve_target, but raises TargetNotFoundError for a missing entity."""
    target = await resolve_target(db, kind, target_id)
    if target is None:
        raise TargetNotFoundError(f"{TargetKind(kind).value.title()} {target_id} not found")
    return target
