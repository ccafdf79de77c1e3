from quickwallet.modules.users.entities.user_entity import UserEntity

User = UserEntity

__all__ = ["User", "UserEntity"]
