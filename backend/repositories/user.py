from typing import Optional

from sqlalchemy.exc import IntegrityError

from errors import EmailExistsError, UserNotFoundError, UsernameExistsError
from models.user import User
from repositories.base import BaseRepository, is_unique_violation


class UserRepository(BaseRepository[User]):
    model = User
    not_found_error = UserNotFoundError

    def create(self, *, email: str, username: str, hashed_password: str) -> User:
        return self._add(
            User(email=email, username=username, hashed_password=hashed_password)
        )

    def get_by_login(self, login: str) -> Optional[User]:
        """Find a user by email OR username."""
        return self._run(
            lambda: self._query()
            .filter((User.email == login) | (User.username == login))
            .first()
        )

    def email_exists(self, email: str) -> bool:
        return self._run(
            lambda: self._query_including_deleted().filter(User.email == email).first()
        ) is not None

    def username_exists(self, username: str) -> bool:
        return self._run(
            lambda: self._query_including_deleted().filter(User.username == username).first()
        ) is not None

    def set_password(self, user_id, hashed_password: str) -> User:
        """Replace the password hash and invalidate every issued token."""
        user = self.get_by_id(user_id)
        user.hashed_password = hashed_password
        user.token_version += 1
        return self._touch(user)

    def _translate_integrity_error(self, exc: IntegrityError) -> Exception:
        if is_unique_violation(exc):
            if "email" in str(exc.orig):
                return EmailExistsError()
            return UsernameExistsError()
        return super()._translate_integrity_error(exc)
