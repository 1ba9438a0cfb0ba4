import pytest

from envd_compiler.config import SpecModel

PUBLIC_KEY = "ssh-ed25519 AAAA...\n"


@pytest.fixture
def public_key(tmp_path):
    path = tmp_path / "id_ed25519.pub"
    path.write_text(PUBLIC_KEY)
    return path


@pytest.fixture
def make_spec(public_key):
    def factory(**fields):
        fields.setdefault("public_key_path", public_key)
        return SpecModel(**fields)

    return factory
