"""HashiCorp Vault provider.

Disabled until a Vault client is wired in: validation fails for every source.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from ..core.context import Context

PROVIDER_NAME = "vault"

DEFAULT_ADDRESS = "http://127.0.0.1:8200"
DEFAULT_MOUNT_PATH = "secret"
DEFAULT_TIMEOUT = 30.0
MAX_SECRET_SIZE = 1024 * 1024


class VaultProvider:
    def __init__(
        self,
        token: str,
        address: Optional[str] = None,
        mount_path: Optional[str] = None,
        version: Optional[int] = None,
    ):
        self.name = PROVIDER_NAME
        self.token = token
        self.address = address or DEFAULT_ADDRESS
        self.mount_path = mount_path or DEFAULT_MOUNT_PATH
        self.version = version
        self.timeout = DEFAULT_TIMEOUT
        self.enabled = False

    def validate(self, source: str) -> None:
        if not self.enabled:
            raise NotImplementedError("vault provider is not yet implemented")
        if not source or not source.strip():
            raise ValueError("source path cannot be empty")
        if ".." in source:
            raise ValueError(f"invalid path (contains ..): {source}")

    def load(self, ctx: Context, source: str) -> Dict[str, str]:
        self.validate(source)
        raise NotImplementedError(
            f"vault provider is not yet implemented (would load from: {self.mount_path}/{source})"
        )


def create_vault_provider(config: Dict[str, Any]) -> VaultProvider:
    token = config.get("token")
    if not isinstance(token, str) or not token:
        raise ValueError("vault token must be a non-empty string")
    version = config.get("version")
    return VaultProvider(
        token=token,
        address=config.get("address") if isinstance(config.get("address"), str) else None,
        mount_path=config.get("mount_path") if isinstance(config.get("mount_path"), str) else None,
        version=int(version) if version is not None else None,
    )
