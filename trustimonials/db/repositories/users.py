from typing import Optional

from sqlalchemy import select

from trustimonials.db.enums import UserRoleEnum
from trustimonials.db.models import User
from trustimonials.db.repositories.base import Repository, coerce_uuid


class UsersRepository(Repository):
    def get(self, user_id) -> Optional[User]:
        parsed = coerce_uuid(user_id)
        if parsed is None:
            return None
        return self.session.get(User, parsed)

    def get_by_external_id(self, external_id: str) -> Optional[User]:
        stmt = select(User).where(User.external_id == external_id)
        return self.session.scalars(stmt).first()

    def upsert_from_claims(
        self,
        *,
        external_id: str,
        email: Optional[str] = None,
        name: Optional[str] = None,
        role: UserRoleEnum = UserRoleEnum.user,
    ) -> User:
        user = self.get_by_external_id(external_id)
        if user is None:
            return self.save(User(external_id=external_id, email=email, name=name, role=role))
        changed = False
        for attr, value in (("email", email), ("name", name), ("role", role)):
            if value is not None and getattr(user, attr) != value:
                setattr(user, attr, value)
                changed = True
        if changed:
            self.session.commit()
            self.session.refresh(user)
        return user
