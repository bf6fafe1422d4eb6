from sqlalchemy import (
    Boolean, Column, DateTime, ForeignKey, Integer, JSON, String, Text, UniqueConstraint,
)
from sqlalchemy.orm import relationship

from socialhub.clock import utcnow
from socialhub.db.base import Base


class Platform:
    META = "META"
    X = "X"
    LINKEDIN = "LINKEDIN"
    TIKTOK = "TIKTOK"
    ALL = (META, X, LINKEDIN, TIKTOK)


class PostStatus:
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    SCHEDULED = "SCHEDULED"
    PUBLISHING = "PUBLISHING"
    PUBLISHED = "PUBLISHED"
    FAILED = "FAILED"
    ALL = (DRAFT, PENDING_APPROVAL, APPROVED, SCHEDULED, PUBLISHING, PUBLISHED, FAILED)


class ApprovalStatus:
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(320), unique=True, nullable=False, index=True)
    name = Column(String(256), nullable=True)
    password_hash = Column(String(128), nullable=False)
    avatar_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime, default=utcnow)

    memberships = relationship("WorkspaceMembership", back_populates="user", cascade="all, delete-orphan")


class Workspace(Base):
    __tablename__ = "workspaces"
    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(256), nullable=False)
    slug = Column(String(128), unique=True, nullable=False, index=True)
    tier = Column(String(32), default="FREE")  # FREE | PRO | ENTERPRISE
    settings = Column(JSON, default=dict)
    owner_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    owner = relationship("User")
    roles = relationship("Role", back_populates="workspace", cascade="all, delete-orphan")
    members = relationship("WorkspaceMembership", back_populates="workspace", cascade="all, delete-orphan")
    platform_accounts = relationship("PlatformAccount", back_populates="workspace", cascade="all, delete-orphan")
    posts = relationship("Post", back_populates="workspace", cascade="all, delete-orphan")


class Role(Base):
    __tablename__ = "roles"
    __table_args__ = (UniqueConstraint("workspace_id", "name", name="uq_roles_workspace_name"),)
    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False)
    name = Column(String(128), nullable=False)
    permissions = Column(JSON, default=list)  # "*" grants everything
    is_default = Column(Boolean, default=False)

    workspace = relationship("Workspace", back_populates="roles")
    memberships = relationship("WorkspaceMembership", back_populates="role")


class WorkspaceMembership(Base):
    __tablename__ = "workspace_memberships"
    __table_args__ = (UniqueConstraint("workspace_id", "user_id", name="uq_memberships_workspace_user"),)
    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    role_id = Column(Integer, ForeignKey("roles.id"), nullable=False)
    created_at = Column(DateTime, default=utcnow)

    workspace = relationship("Workspace", back_populates="members")
    user = relationship("User", back_populates="memberships")
    role = relationship("Role", back_populates="memberships")


class PlatformAccount(Base):
    __tablename__ = "platform_accounts"
    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False)
    connected_by_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    platform = Column(String(16), nullable=False)
    platform_account_id = Column(String(128), nullable=False)
    platform_username = Column(String(256), nullable=True)
    access_token_encrypted = Column(Text, nullable=False)
    refresh_token_encrypted = Column(Text, nullable=True)
    token_expires_at = Column(DateTime, nullable=True)
    timezone = Column(String(64), default="UTC")
    is_active = Column(Boolean, default=True)
    created_at = Column(DateTime, default=utcnow)

    workspace = relationship("Workspace", back_populates="platform_accounts")
    snapshots = relationship(
        "AnalyticsSnapshot", back_populates="account", cascade="all, delete-orphan",
        order_by="AnalyticsSnapshot.fetched_at.desc()",
    )


class Post(Base):
    __tablename__ = "posts"
    id = Column(Integer, primary_key=True, index=True)
    workspace_id = Column(Integer, ForeignKey("workspaces.id"), nullable=False, index=True)
    created_by_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    title = Column(String(512), nullable=True)
    content = Column(Text, nullable=False)
    media_urls = Column(JSON, default=list)
    status = Column(String(32), default=PostStatus.DRAFT, index=True)
    scheduled_at = Column(DateTime, nullable=True, index=True)
    published_at = Column(DateTime, nullable=True)
    ai_generated = Column(Boolean, default=False)
    source_url = Column(String(1024), nullable=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    workspace = relationship("Workspace", back_populates="posts")
    created_by = relationship("User")
    platforms = relationship(
        "PostPlatformConfig", back_populates="post", cascade="all, delete-orphan",
        order_by="PostPlatformConfig.id",
    )
    approval_steps = relationship(
        "ApprovalStep", back_populates="post", cascade="all, delete-orphan",
        order_by="ApprovalStep.order",
    )


class PostPlatformConfig(Base):
    __tablename__ = "post_platform_configs"
    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    platform = Column(String(16), nullable=False)
    account_id = Column(Integer, ForeignKey("platform_accounts.id"), nullable=False)
    content = Column(Text, nullable=True)  # platform-specific override
    media_urls = Column(JSON, default=list)
    hashtags = Column(JSON, default=list)
    status = Column(String(32), default=PostStatus.DRAFT)
    published_post_id = Column(String(256), nullable=True)
    published_at = Column(DateTime, nullable=True)
    failure_reason = Column(Text, nullable=True)

    post = relationship("Post", back_populates="platforms")
    account = relationship("PlatformAccount")


class ApprovalStep(Base):
    __tablename__ = "approval_steps"
    id = Column(Integer, primary_key=True, index=True)
    post_id = Column(Integer, ForeignKey("posts.id"), nullable=False, index=True)
    order = Column(Integer, nullable=False)
    approver_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    delegated_to_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    status = Column(String(16), default=ApprovalStatus.PENDING)
    comment = Column(Text, nullable=True)
    decided_at = Column(DateTime, nullable=True)

    post = relationship("Post", back_populates="approval_steps")
    approver = relationship("User", foreign_keys=[approver_id])
    delegated_to = relationship("User", foreign_keys=[delegated_to_id])


class AnalyticsSnapshot(Base):
    __tablename__ = "analytics_snapshots"
    id = Column(Integer, primary_key=True, index=True)
    account_id = Column(Integer, ForeignKey("platform_accounts.id"), nullable=False, index=True)
    metrics = Column(JSON, default=dict)
    fetched_at = Column(DateTime, default=utcnow, index=True)

    account = relationship("PlatformAccount", back_populates="snapshots")
