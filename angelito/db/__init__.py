from angelito.db.models import Assignment, Base, Group, GroupStatus, User, group_members
from angelito.db.session import SessionLocal, get_session, init_engine

__all__ = [
    "Assignment",
    "Base",
    "Group",
    "GroupStatus",
    "User",
    "group_members",
    "SessionLocal",
    "get_session",
    "init_engine",
]
