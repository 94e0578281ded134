from __future__ import annotations

import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import and_, delete, func, select
from sqlalchemy.exc import IntegrityError

from angelito.db.models import Assignment, Group, GroupStatus, User, group_members


def get_user_by_uid(session, uid: str) -> Optional[User]:
    return session.scalar(select(User).where(User.uid == uid))


def upsert_user(
    session,
    uid: str,
    display_name: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    user = get_user_by_uid(session, uid)
    if user:
        if display_name is not None:
            user.display_name = display_name
        if email is not None:
            user.email = email
        return user

    user = User(uid=uid, display_name=display_name, email=email)
    session.add(user)
    session.flush()
    return user


def get_group_by_id(session, group_id: int) -> Optional[Group]:
    return session.scalar(select(Group).where(Group.id == group_id))


def create_group(
    session,
    name: str,
    admin_uid: str,
    budget_amount: Optional[Decimal],
    event_date: Optional[datetime.date],
    description: str,
) -> Group:
    group = Group(
        name=name,
        admin_uid=admin_uid,
        status=GroupStatus.PENDING,
        is_locked=False,
        budget_amount=budget_amount,
        event_date=event_date,
        description=description,
    )
    session.add(group)
    session.flush()
    return group


def delete_group(session, group: Group) -> None:
    clear_assignments(session, group.id)
    session.execute(delete(group_members).where(group_members.c.group_id == group.id))
    session.delete(group)
    session.flush()


def list_groups_for_user(session, uid: str) -> List[Group]:
    return list(
        session.scalars(
            select(Group)
            .join(group_members, group_members.c.group_id == Group.id)
            .where(group_members.c.user_uid == uid)
            .order_by(Group.id)
        ).all()
    )


def list_member_uids(session, group_id: int) -> List[str]:
    return list(
        session.scalars(
            select(group_members.c.user_uid)
            .where(group_members.c.group_id == group_id)
            .order_by(group_members.c.position)
        ).all()
    )


def count_group_members(session, group_id: int) -> int:
    return session.scalar(
        select(func.count()).select_from(group_members).where(group_members.c.group_id == group_id)
    )


def is_user_in_group(session, uid: str, group_id: int) -> bool:
    return session.scalar(
        select(func.count())
        .select_from(group_members)
        .where(and_(group_members.c.user_uid == uid, group_members.c.group_id == group_id))
    ) > 0


def add_user_to_group(session, uid: str, group_id: int) -> bool:
    if is_user_in_group(session, uid, group_id):
        return False
    position = session.scalar(
        select(func.coalesce(func.max(group_members.c.position), -1) + 1).where(
            group_members.c.group_id == group_id
        )
    )
    try:
        session.execute(
            group_members.insert().values(group_id=group_id, user_uid=uid, position=position)
        )
        return True
    except IntegrityError:
        return False


def remove_user_from_group(session, uid: str, group_id: int) -> bool:
    result = session.execute(
        delete(group_members).where(
            and_(group_members.c.user_uid == uid, group_members.c.group_id == group_id)
        )
    )
    return bool(result.rowcount)


def update_group_status(
    session,
    group: Group,
    status: GroupStatus,
    assigned_at: Optional[datetime.datetime] = None,
) -> None:
    group.status = status
    group.assigned_at = assigned_at


def update_group_lock(session, group: Group, is_locked: bool) -> None:
    group.is_locked = is_locked


def update_group_details(
    session,
    group: Group,
    name: str,
    budget_amount: Optional[Decimal],
    event_date: Optional[datetime.date],
    description: str,
) -> None:
    group.name = name
    group.budget_amount = budget_amount
    group.event_date = event_date
    group.description = description


def create_assignments(session, group_id: int, assignments: Dict[str, str]) -> None:
    rows = [
        Assignment(group_id=group_id, giver_uid=giver_uid, receiver_uid=receiver_uid)
        for giver_uid, receiver_uid in assignments.items()
    ]
    session.add_all(rows)
    session.flush()


def list_assignments(session, group_id: int) -> List[Assignment]:
    return list(session.scalars(select(Assignment).where(Assignment.group_id == group_id)).all())


def load_assignment_map(session, group_id: int) -> Dict[str, str]:
    return {row.giver_uid: row.receiver_uid for row in list_assignments(session, group_id)}


def clear_assignments(session, group_id: int) -> None:
    session.execute(delete(Assignment).where(Assignment.group_id == group_id))
