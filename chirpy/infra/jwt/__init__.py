from .jwt_access_token_codec import JWTAccessTokenCodec

__all__ = ["JWTAccessTokenCodec"]
