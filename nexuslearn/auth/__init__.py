from .auth import extract_user_id, require_authenticated_user

__all__ = ["extract_user_id", "require_authenticated_user"]
