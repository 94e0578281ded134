from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from loguru import logger

from angelito.db import Group, GroupStatus, User, repo
from angelito.services.assignment import (
    MIN_MEMBERS,
    Shuffler,
    generate_assignment,
    is_valid_assignment,
)


class GroupError(RuntimeError):
    pass


class GroupNotFoundError(GroupError):
    pass


class PermissionDeniedError(GroupError):
    pass


class CorruptedAssignmentError(GroupError):
    pass


def _get_group(session, group_id: int) -> Group:
    group = repo.get_group_by_id(session, group_id)
    if group is None:
        raise GroupNotFoundError("Group not found.")
    return group


def _require_admin(group: Group, uid: str, action: str) -> None:
    if group.admin_uid != uid:
        raise PermissionDeniedError(f"Only the group admin can {action}.")


def _status_for_size(member_count: int) -> GroupStatus:
    return GroupStatus.READY if member_count >= MIN_MEMBERS else GroupStatus.PENDING


def create_group(
    session,
    name: str,
    admin_uid: str,
    budget: Optional[Decimal] = None,
    event_date: Optional[datetime.date] = None,
    description: str = "",
) -> Group:
    repo.upsert_user(session, admin_uid)
    group = repo.create_group(session, name, admin_uid, budget, event_date, description)
    repo.add_user_to_group(session, admin_uid, group.id)
    logger.bind(group_id=group.id, admin_uid=admin_uid).info("Group created")
    return group


def add_member(session, group_id: int, uid: str) -> Group:
    group = _get_group(session, group_id)
    if group.status == GroupStatus.ASSIGNED:
        raise GroupError("The draw for this group has already taken place.")
    if group.is_locked:
        raise GroupError("This group is locked. Ask the admin to unlock it.")

    repo.upsert_user(session, uid)
    if not repo.add_user_to_group(session, uid, group.id):
        raise GroupError("The user is already in the group.")

    repo.update_group_status(session, group, _status_for_size(repo.count_group_members(session, group.id)))
    logger.bind(group_id=group.id, uid=uid).info("Member added")
    return group


def remove_member(session, group_id: int, uid: str, requester_uid: str) -> Group:
    group = _get_group(session, group_id)
    _require_admin(group, requester_uid, "remove members")
    if uid == group.admin_uid:
        raise GroupError("The admin cannot be removed from the group.")
    if group.status == GroupStatus.ASSIGNED:
        raise GroupError("Dissolve the draw before removing members.")
    if not repo.remove_user_from_group(session, uid, group.id):
        raise GroupError("The user is not in this group.")

    repo.update_group_status(session, group, _status_for_size(repo.count_group_members(session, group.id)))
    logger.bind(group_id=group.id, uid=uid).info("Member removed")
    return group


def toggle_lock(session, group_id: int, admin_uid: str) -> bool:
    group = _get_group(session, group_id)
    _require_admin(group, admin_uid, "lock or unlock the group")
    repo.update_group_lock(session, group, not group.is_locked)
    logger.bind(group_id=group.id, is_locked=group.is_locked).info("Group lock toggled")
    return group.is_locked


def update_group(
    session,
    group_id: int,
    admin_uid: str,
    name: str,
    budget: Optional[Decimal] = None,
    event_date: Optional[datetime.date] = None,
    description: str = "",
) -> Group:
    group = _get_group(session, group_id)
    _require_admin(group, admin_uid, "edit the group")
    if not name.strip():
        raise GroupError("Group name cannot be empty.")
    repo.update_group_details(session, group, name.strip(), budget, event_date, description)
    return group


def perform_draw(session, group_id: int, rng: Optional[Shuffler] = None) -> Dict[str, str]:
    """Draw the group and store the mapping together with the ASSIGNED status.

    Both writes happen in the caller's session, so they are committed or
    rolled back together.
    """
    group = _get_group(session, group_id)
    if group.status != GroupStatus.READY:
        raise GroupError("The group is not ready for the draw.")

    members = repo.list_member_uids(session, group.id)
    if len(members) < MIN_MEMBERS:
        raise GroupError(f"At least {MIN_MEMBERS} members are needed for the draw.")

    assignments = generate_assignment(members, rng=rng)

    repo.create_assignments(session, group.id, assignments)
    repo.update_group_status(
        session,
        group,
        GroupStatus.ASSIGNED,
        assigned_at=datetime.datetime.now(datetime.timezone.utc),
    )
    logger.bind(group_id=group.id, members=len(members)).info("Draw performed")
    return assignments


def get_assignments(session, group_id: int) -> Dict[str, str]:
    group = _get_group(session, group_id)
    if group.status != GroupStatus.ASSIGNED:
        raise GroupError("The draw has not taken place yet.")

    assignments = repo.load_assignment_map(session, group.id)
    members = repo.list_member_uids(session, group.id)
    if not is_valid_assignment(assignments, members=members):
        logger.bind(group_id=group.id).error("Stored assignments failed validation")
        raise CorruptedAssignmentError("The stored draw is invalid. Dissolve it and draw again.")
    return assignments


def get_my_assignment(session, group_id: int, uid: str) -> User:
    assignments = get_assignments(session, group_id)
    receiver_uid = assignments.get(uid)
    if receiver_uid is None:
        raise GroupError("You have no assignment in this group.")

    receiver = repo.get_user_by_uid(session, receiver_uid)
    if receiver is None:
        raise CorruptedAssignmentError("The assigned receiver no longer exists.")
    return receiver


def dissolve_draw(session, group_id: int, admin_uid: str) -> Group:
    group = _get_group(session, group_id)
    _require_admin(group, admin_uid, "dissolve the draw")
    if group.status != GroupStatus.ASSIGNED:
        raise GroupError("There is no draw to dissolve.")

    repo.clear_assignments(session, group.id)
    repo.update_group_status(session, group, _status_for_size(repo.count_group_members(session, group.id)))
    logger.bind(group_id=group.id).info("Draw dissolved")
    return group


def delete_group(session, group_id: int, requester_uid: str) -> None:
    group = _get_group(session, group_id)
    _require_admin(group, requester_uid, "delete the group")
    repo.delete_group(session, group)
    logger.bind(group_id=group_id).info("Group deleted")


def list_user_groups(session, uid: str) -> List[Group]:
    return repo.list_groups_for_user(session, uid)


def list_members(session, group_id: int) -> List[str]:
    group = _get_group(session, group_id)
    return repo.list_member_uids(session, group.id)
