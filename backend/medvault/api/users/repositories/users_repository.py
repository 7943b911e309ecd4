"""Users repository — read access for the authorization workflow."""

from medvault.clock import now
from medvault.database import Database
from medvault.api.users.dto.user import Role, UserResponse
from medvault.api.users.orm.user_model import UserModel


def _model_to_dto(model: UserModel) -> UserResponse:
    return UserResponse(
        id=model.id,
        username=model.username,
        role=model.role,
        is_active=bool(model.is_active),
        created_at=model.created_at,
    )


class UsersRepository:
    def __init__(self, db: Database):
        self.db = db

    def get_by_id(self, user_id: int) -> UserResponse | None:
        with self.db.session() as session:
            model = session.get(UserModel, user_id)
            return _model_to_dto(model) if model else None

    def create(
        self,
        username: str,
        role: str = Role.GUEST.value,
        is_active: bool = True,
    ) -> UserResponse:
        with self.db.session() as session:
            model = UserModel(
                username=username,
                role=role,
                is_active=is_active,
                created_at=now(),
            )
            session.add(model)
            session.commit()
            session.refresh(model)
            return _model_to_dto(model)
