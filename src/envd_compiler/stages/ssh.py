"""Installation of the local SSH public key as the container's authorized key."""

from __future__ import annotations

import posixpath

from ..config import SpecModel
from ..errors import CredentialError
from ..plan import BuildState, MakeDir, WriteFile

AUTHORIZED_KEYS_PATH = "/var/envd/authorized_keys"
KEY_MARKER = b" envd"


class CredentialInstaller:
    name = "ssh-key"

    def read_key(self, spec: SpecModel) -> bytes:
        path = spec.public_key_path.expanduser()
        try:
            data = path.read_bytes()
        except OSError as e:
            raise CredentialError(
                "Cannot read public SSH key",
                stage=self.name,
                context={"path": str(path), "reason": str(e)},
            ) from e
        if data.endswith(b"\n"):
            data = data[:-1]
        return data

    def apply(self, spec: SpecModel, state: BuildState) -> BuildState:
        key = self.read_key(spec)
        return state.then(
            MakeDir(
                posixpath.dirname(AUTHORIZED_KEYS_PATH),
                0o755,
                parents=True,
                owner=state.account,
            ),
            WriteFile(
                AUTHORIZED_KEYS_PATH,
                0o644,
                key + KEY_MARKER,
                owner=state.account,
                label="install ssh keys",
            ),
        )
