from repositories.unit_of_work import TransactionManager
from services.auth import hash_password, verify_password


class PasswordService:
    def __init__(self, tx: TransactionManager):
        self.tx = tx

    def change_password(self, *, user_id, current_password: str, new_password: str) -> bool:
        """
        Change password for an authenticated user.

        Returns True on success, False if the current password is wrong.
        Bumps the user's token version so every existing session ends.
        """
        with self.tx.repositories() as uow:
            user = uow.users.get_by_id(user_id)
            if not verify_password(current_password, user.hashed_password):
                return False
            uow.users.set_password(user.id, hash_password(new_password))
        return True
