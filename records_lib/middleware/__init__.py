from .admin import require_admin_token, check_admin_token, get_bearer_token, access_denied

__all__ = [
	"require_admin_token",
	"check_admin_token",
	"get_bearer_token",
	"access_denied",
]
