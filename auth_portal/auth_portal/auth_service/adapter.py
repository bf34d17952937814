"""
SQLAlchemy adapter mapping the auth layer's user/account/session model onto
the relational schema.
"""
from datetime import datetime
from typing import Optional, Tuple

from sqlalchemy.orm import Session

from .models import Account, User, VerificationToken
from .models import Session as SessionRecord


class SQLAlchemyAdapter:
    """
    The full adapter contract over the four tables.

    ``get_user`` and the verification-token methods are not called by the
    credentials or OAuth flows. Verification tokens back email sign-in links,
    which no provider here issues.
    """

    def __init__(self, db: Session):
        self.db = db

    # Users

    def create_user(self, **fields) -> User:
        user = User(**fields)
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        return user

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        return self.db.query(User).filter(User.email == email).first()

    def get_user_by_account(self, provider: str, provider_account_id: str) -> Optional[User]:
        account = (
            self.db.query(Account)
            .filter(Account.provider == provider, Account.provider_account_id == provider_account_id)
            .first()
        )
        return account.user if account else None

    # Accounts

    def link_account(self, user: User, **fields) -> Account:
        account = Account(user_id=user.id, **fields)
        self.db.add(account)
        self.db.commit()
        self.db.refresh(account)
        return account

    # Database sessions

    def create_session(self, user: User, session_token: str, expires: datetime) -> SessionRecord:
        record = SessionRecord(user_id=user.id, session_token=session_token, expires=expires)
        self.db.add(record)
        self.db.commit()
        self.db.refresh(record)
        return record

    def get_session_and_user(self, session_token: str) -> Optional[Tuple[SessionRecord, User]]:
        """Return the unexpired session and its user; expired rows are removed."""
        record = (
            self.db.query(SessionRecord)
            .filter(SessionRecord.session_token == session_token)
            .first()
        )
        if record is None:
            return None
        if record.expires < datetime.utcnow():
            self.delete_session(session_token)
            return None
        return record, record.user

    def update_session_expiry(self, record: SessionRecord, expires: datetime) -> SessionRecord:
        record.expires = expires
        self.db.add(record)
        self.db.commit()
        return record

    def delete_session(self, session_token: str) -> None:
        self.db.query(SessionRecord).filter(SessionRecord.session_token == session_token).delete()
        self.db.commit()

    # Verification tokens

    def create_verification_token(self, identifier: str, token: str, expires: datetime) -> VerificationToken:
        record = VerificationToken(identifier=identifier, token=token, expires=expires)
        self.db.add(record)
        self.db.commit()
        return record

    def use_verification_token(self, identifier: str, token: str) -> Optional[VerificationToken]:
        """Consume a token: it is deleted whether or not it has expired."""
        record = (
            self.db.query(VerificationToken)
            .filter(VerificationToken.identifier == identifier, VerificationToken.token == token)
            .first()
        )
        if record is None:
            return None
        used = VerificationToken(identifier=record.identifier, token=record.token, expires=record.expires)
        self.db.delete(record)
        self.db.commit()
        if used.expires < datetime.utcnow():
            return None
        return used
