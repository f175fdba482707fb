# connectlist/core/avatars.py
import os
import re
from typing import Any, Mapping, Optional

STORAGE_PUBLIC_URL = os.getenv(
    "STORAGE_PUBLIC_URL", "https://connectlist.blob.core.windows.net"
)
AVATAR_BUCKET = os.getenv("AVATAR_BUCKET", "avatars")

_ABSOLUTE_URL = re.compile(r"^https?://", re.IGNORECASE)

# alias heredados donde distintas versiones del perfil guardaron la key
STORAGE_KEY_FIELDS = ("avatar", "avatar_path", "avatarKey", "avatar_key")
AUTH_AVATAR_FIELDS = ("avatar_url", "picture", "avatar")


def is_absolute_url(value: Any) -> bool:
    return isinstance(value, str) and bool(_ABSOLUTE_URL.match(value))


def public_url(
    path: Optional[str],
    bucket: str = AVATAR_BUCKET,
    base_url: Optional[str] = None,
) -> Optional[str]:
    """
    URL pública de un objeto en storage. Si `path` ya es una URL absoluta
    se devuelve tal cual. No hace ninguna llamada de red.
    """
    if not path:
        return None
    if is_absolute_url(path):
        return path

    base = (base_url if base_url is not None else STORAGE_PUBLIC_URL).rstrip("/")
    return f"{base}/{bucket.strip('/')}/{str(path).lstrip('/')}"


def _first_present(record: Mapping[str, Any], fields) -> Optional[str]:
    for field in fields:
        value = record.get(field)
        if value:
            return value
    return None


def resolve_avatar_url(
    record: Optional[Mapping[str, Any]],
    auth_metadata: Optional[Mapping[str, Any]] = None,
    storage_base_url: Optional[str] = None,
    bucket: str = AVATAR_BUCKET,
) -> Optional[str]:
    """
    Resuelve el avatar a mostrar. Gana la primera fuente que aplique:
      1. avatar_url absoluta (http/https), tal cual
      2. una storage key (avatar, avatar_path, avatarKey, avatar_key)
      3. metadata del proveedor de auth (avatar_url, picture, avatar)
      4. None -> el cliente pinta el placeholder
    """
    record = record or {}

    avatar_url = record.get("avatar_url")
    if is_absolute_url(avatar_url):
        return avatar_url

    key = _first_present(record, STORAGE_KEY_FIELDS)
    if key:
        return public_url(key, bucket=bucket, base_url=storage_base_url)

    if auth_metadata:
        return _first_present(auth_metadata, AUTH_AVATAR_FIELDS)

    return None
