ADMIN_EMAIL = "admin@ptm.com"
ADMIN_PASSWORD = "Admin@123"
DEFAULT_PASSWORD = "longpass1"

API = "/api/v1"


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
