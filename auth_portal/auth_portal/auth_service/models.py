from sqlalchemy import Column, Integer, String, ForeignKey, DateTime, Text, UniqueConstraint, PrimaryKeyConstraint
from sqlalchemy.orm import relationship
import uuid

from .db import Base


def generate_id() -> str:
    return uuid.uuid4().hex


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=generate_id)
    name = Column(String, nullable=True)
    email = Column(String, unique=True, index=True, nullable=True)
    email_verified = Column("email_verified", DateTime, nullable=True)
    image = Column(String, nullable=True)
    # Hash only, never the plaintext
    password = Column(String, nullable=True)

    accounts = relationship("Account", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)
    sessions = relationship("Session", back_populates="user", cascade="all, delete-orphan", passive_deletes=True)


class Account(Base):
    __tablename__ = "accounts"
    id = Column(String, primary_key=True, default=generate_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    type = Column(String, nullable=False)
    provider = Column(String, nullable=False)
    provider_account_id = Column(String, nullable=False)
    refresh_token = Column(Text, nullable=True)
    access_token = Column(Text, nullable=True)
    expires_at = Column(Integer, nullable=True)
    token_type = Column(String, nullable=True)
    scope = Column(String, nullable=True)
    id_token = Column(Text, nullable=True)
    session_state = Column(String, nullable=True)

    user = relationship("User", back_populates="accounts")

    __table_args__ = (
        UniqueConstraint("provider", "provider_account_id", name="uq_accounts_provider_account"),
    )


class Session(Base):
    __tablename__ = "sessions"
    id = Column(String, primary_key=True, default=generate_id)
    session_token = Column(String, unique=True, index=True, nullable=False)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    expires = Column(DateTime, nullable=False)

    user = relationship("User", back_populates="sessions")


class VerificationToken(Base):
    __tablename__ = "verification_tokens"
    identifier = Column(String, nullable=False)
    token = Column(String, nullable=False)
    expires = Column(DateTime, nullable=False)

    __table_args__ = (
        PrimaryKeyConstraint("identifier", "token", name="pk_verification_tokens"),
        UniqueConstraint("identifier", "token", name="uq_verification_tokens_identifier_token"),
    )
