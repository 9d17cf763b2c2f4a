# repositories/client_user_repository.py
from typing import List, Optional
from sqlmodel import Session, select

from taskboard.models.client_user import ClientUser, UserStatus
from taskboard.utils import normalize_email, utcnow


class ClientUsersRepository:
    def __init__(self, session: Session):
        self.session = session

    def create_user(self, user: ClientUser) -> ClientUser:
        user.email = normalize_email(user.email)
        self.session.add(user)
        self.session.flush()
        return user

    def get_users(self) -> List[ClientUser]:
        statement = select(ClientUser).order_by(ClientUser.id)
        return list(self.session.exec(statement).all())

    def get_user(self, user_id: int) -> Optional[ClientUser]:
        return self.session.get(ClientUser, user_id)

    def get_user_by_email(self, email: str) -> Optional[ClientUser]:
        statement = select(ClientUser).where(ClientUser.email == normalize_email(email))
        return self.session.exec(statement).first()

    def set_status(self, user: ClientUser, status: UserStatus) -> ClientUser:
        user.status = status
        user.updated_at = utcnow()
        self.session.add(user)
        self.session.flush()
        return user
