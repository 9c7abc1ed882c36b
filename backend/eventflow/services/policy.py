"""Access policy for workflow operations.

One declarative table maps each operation to the (role, relation) pairs that
may perform it; ``authorize`` is evaluated once per call. ``ANY_ROLE`` matches
every role, and the relation says how the actor must relate to the event.
Authentication happens upstream; callers arrive with an id and a role.
"""
import enum
from dataclasses import dataclass
from typing import Optional, Union

from eventflow.errors import PermissionDeniedError
from eventflow.models.event import Event
from eventflow.models.user import User, UserRole


class Operation(str, enum.Enum):
    update_draft = "update_draft"
    submit = "submit"
    record_decision = "record_decision"
    reassign = "reassign"
    submit_debrief = "submit_debrief"


class Relation(str, enum.Enum):
    any = "any"
    creator = "creator"
    assignee = "assignee"


ANY_ROLE = "*"

Rule = tuple[Union[UserRole, str], Relation]

POLICIES: dict[Operation, frozenset[Rule]] = {
    Operation.update_draft: frozenset({
        (UserRole.central_planner, Relation.any),
        (ANY_ROLE, Relation.creator),
    }),
    Operation.submit: frozenset({
        (UserRole.central_planner, Relation.any),
        (ANY_ROLE, Relation.creator),
    }),
    Operation.record_decision: frozenset({
        (UserRole.central_planner, Relation.any),
        (UserRole.reviewer, Relation.assignee),
    }),
    Operation.reassign: frozenset({
        (UserRole.central_planner, Relation.any),
    }),
    Operation.submit_debrief: frozenset({
        (UserRole.central_planner, Relation.any),
        (ANY_ROLE, Relation.creator),
    }),
}

DENIAL_MESSAGES = {
    Operation.update_draft: "Only the event creator or a planner can edit this draft.",
    Operation.submit: "Only the event creator or a planner can submit this event.",
    Operation.record_decision: "Only the assigned reviewer or a planner can record a decision.",
    Operation.reassign: "Only planners can update assignees.",
    Operation.submit_debrief: "Only the event creator or a planner can submit the debrief.",
}


@dataclass(frozen=True)
class Actor:
    """Resolved caller identity."""

    id: str
    role: UserRole

    @classmethod
    def from_user(cls, user: User) -> "Actor":
        return cls(id=user.id, role=UserRole(user.role))

    @property
    def is_planner(self) -> bool:
        return self.role == UserRole.central_planner


def _relation_holds(relation: Relation, actor: Actor, event: Optional[Event]) -> bool:
    if relation == Relation.any:
        return True
    if event is None:
        return False
    if relation == Relation.creator:
        return event.created_by == actor.id
    return event.assignee_id is not None and event.assignee_id == actor.id


def is_allowed(operation: Operation, actor: Actor, event: Optional[Event] = None) -> bool:
    return any(
        (role == ANY_ROLE or role == actor.role) and _relation_holds(relation, actor, event)
        for role, relation in POLICIES[operation]
    )


def authorize(operation: Operation, actor: Actor, event: Optional[Event] = None) -> None:
    if not is_allowed(operation, actor, event):
        raise PermissionDeniedError(DENIAL_MESSAGES[operation])
