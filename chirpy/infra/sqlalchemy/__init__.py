from .sqlalchemy_account_directory import SQLAlchemyAccountDirectory
from .sqlalchemy_refresh_token_store import SQLAlchemyRefreshTokenStore

__all__ = ["SQLAlchemyAccountDirectory", "SQLAlchemyRefreshTokenStore"]
