from typing import List, Optional

from sqlalchemy import select

from database.models import User, Skill
from database.repositories.base import BaseRepository


class AccountRepository(BaseRepository):
    def add_user(self, user: User) -> User:
        return self._persist(user)

    def get_user(self, user_id: str) -> Optional[User]:
        return self.db.get(User, user_id)

    def delete_user(self, user: User) -> None:
        self.db.delete(user)

    def add_skill(self, skill: Skill) -> Skill:
        return self._persist(skill)

    def get_skill(self, skill_id: str) -> Optional[Skill]:
        return self.db.get(Skill, skill_id)

    def get_skills_for_user(self, user_id: str) -> List[Skill]:
        stmt = select(Skill).where(Skill.user_id == user_id)
        return self.db.execute(stmt).scalars().all()

    def delete_skill(self, skill: Skill) -> None:
        self.db.delete(skill)
