from .auth.types import UserInfo


def normalize_api_version(api_version: str | float | int) -> str:
    """``"v43.0"``, ``"43.0"`` and ``43.0`` all become ``"43.0"``"""
    if isinstance(api_version, (int, float)):
        return f"{float(api_version):.1f}"
    return api_version.strip().lstrip("vV")


class Session:
    """
    Authenticated context shared by every call a client makes.

    Written by login, ``set_session`` and ``apply_token``; read by everything
    else. There is no locking: callers must not log in concurrently with
    other calls on the same client.
    """

    session_id: str
    instance_url: str
    api_version: str
    client_id: str
    user: UserInfo

    def __init__(
        self,
        api_version: str | float | int,
        client_id: str,
        session_id: str = "",
        instance_url: str = "",
    ):
        self.api_version = normalize_api_version(api_version)
        self.client_id = client_id
        self.session_id = session_id
        self.instance_url = instance_url.rstrip("/")
        self.user = UserInfo()

    @property
    def is_authenticated(self) -> bool:
        return self.session_id != ""

    def update(
        self, session_id: str, instance_url: str, user: UserInfo | None = None
    ):
        self.session_id = session_id
        self.instance_url = instance_url.rstrip("/")
        if user is not None:
            self.user = user

    def __repr__(self):
        return (
            f"{type(self).__name__}(instance_url={self.instance_url!r}, "
            f"api_version={self.api_version!r}, user={self.user.name!r}, "
            f"authenticated={self.is_authenticated})"
        )
