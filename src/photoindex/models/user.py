import enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, event
from sqlalchemy.sql import func
from photoindex.lib.uid import USER_PREFIX, ensure_uid, is_uid
from photoindex.models import Base

# Well-known accounts seeded by services.users.bootstrap_default_users().
ADMIN_UID = "u000000000000000"
UNKNOWN_UID = "u000000000000001"
GUEST_UID = "u000000000000002"


class Role(str, enum.Enum):
    ADMIN = "admin"
    CHILD = "child"
    FAMILY = "family"
    FRIEND = "friend"
    GUEST = "guest"
    DEFAULT = "default"


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True)
    user_uid = Column(String(42), unique=True, nullable=False, index=True)
    user_name = Column(String(64), nullable=False, default="", index=True)
    full_name = Column(String(128), nullable=False, default="")
    primary_email = Column(String(255), nullable=False, default="", index=True)
    user_disabled = Column(Boolean, nullable=False, default=False)
    role_admin = Column(Boolean, nullable=False, default=False)
    role_child = Column(Boolean, nullable=False, default=False)
    role_family = Column(Boolean, nullable=False, default=False)
    role_friend = Column(Boolean, nullable=False, default=False)
    role_guest = Column(Boolean, nullable=False, default=False)
    login_attempts = Column(Integer, nullable=False, default=0)
    login_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)
    deleted_at = Column(DateTime, nullable=True, index=True)

    @property
    def registered(self) -> bool:
        return bool(self.user_name) and is_uid(self.user_uid, USER_PREFIX)

    @property
    def is_admin(self) -> bool:
        return self.registered and bool(self.role_admin)

    @property
    def anonymous(self) -> bool:
        return not is_uid(self.user_uid, USER_PREFIX) or self.user_uid == UNKNOWN_UID

    @property
    def guest(self) -> bool:
        return bool(self.role_guest)

    @property
    def role(self) -> Role:
        if self.role_admin:
            return Role.ADMIN
        if self.role_child:
            return Role.CHILD
        if self.role_family:
            return Role.FAMILY
        if self.role_friend:
            return Role.FRIEND
        if self.role_guest:
            return Role.GUEST
        return Role.DEFAULT

    def __str__(self) -> str:
        return self.user_name or self.full_name or self.user_uid or ""


class Password(Base):
    __tablename__ = "passwords"

    uid = Column(String(42), primary_key=True)
    hash = Column(String(255), nullable=False)
    created_at = Column(DateTime, server_default=func.current_timestamp(), nullable=False)
    updated_at = Column(DateTime, server_default=func.current_timestamp(), onupdate=func.current_timestamp(), nullable=False)


@event.listens_for(User, "before_insert")
def _user_before_insert(mapper, connection, target):
    ensure_uid(target, "user_uid", USER_PREFIX)
