import pytest

from envd_compiler.errors import CredentialError
from envd_compiler.plan import (
    CopyFromContext,
    MakeDir,
    Owner,
    RunShell,
    SetEnv,
    WriteFile,
)
from envd_compiler.stages import (
    BaseImageSelector,
    CommandRunner,
    CredentialInstaller,
    FileStager,
    PackageInstaller,
    SourceOverrider,
)
from envd_compiler.stages.run import EXTRA_PATH


def base_state(spec):
    return BaseImageSelector().apply(spec)


def test_source_override(make_spec):
    spec = make_spec(package_source_override="deb http://mirror.example/ubuntu focal main")
    state = SourceOverrider().apply(spec, base_state(spec))

    mkdir, write = state.steps[-2:]
    assert mkdir == MakeDir("/etc/apt", 0o755, parents=True, label="[internal] setting apt source")
    assert isinstance(write, WriteFile)
    assert write.path == "/etc/apt/sources.list"
    assert write.mode == 0o644
    assert write.data == b"deb http://mirror.example/ubuntu focal main"


def test_source_override_absent(make_spec):
    spec = make_spec()
    state = base_state(spec)
    assert SourceOverrider().apply(spec, state) is state


def test_source_override_is_idempotent(make_spec):
    spec = make_spec(package_source_override="deb http://mirror.example/ubuntu focal main")
    state = base_state(spec)
    assert SourceOverrider().apply(spec, state) == SourceOverrider().apply(spec, state)


def test_system_packages(make_spec):
    spec = make_spec(system_packages=["vim", "git"])
    state = PackageInstaller().apply(spec, base_state(spec))

    runs = [step for step in state.steps if isinstance(step, RunShell)]
    assert len(runs) == 1
    run = runs[0]
    assert run.command.argv == (
        "bash",
        "-c",
        "sudo apt-get update && sudo apt-get install -y --no-install-recommends vim git",
    )
    assert [m.target for m in run.mounts] == ["/var/cache/apt", "/var/lib/apt"]
    assert all(m.sharing == "shared" for m in run.mounts)
    assert run.mounts[0].cache_id != run.mounts[1].cache_id
    assert run.label == "apt-get install vim git"


def test_system_packages_cache_ids_are_stable(make_spec):
    spec = make_spec(system_packages=["vim"])
    first = PackageInstaller().apply(spec, base_state(spec)).steps[-1]
    second = PackageInstaller().apply(make_spec(system_packages=["vim"]), base_state(spec)).steps[-1]

    assert first.mounts == second.mounts


def test_system_packages_empty(make_spec):
    spec = make_spec()
    state = base_state(spec)
    assert PackageInstaller().apply(spec, state) is state


def test_exec_commands_are_chained(make_spec):
    spec = make_spec(exec=["pip install numpy", "echo done", "ls"])
    state = CommandRunner().apply(spec, base_state(spec))

    env, *runs = state.steps[1:]
    assert env == SetEnv("PATH", EXTRA_PATH)
    assert [run.command.argv[-1] for run in runs] == ["pip install numpy", "echo done", "ls"]
    assert all(run.command.argv[:2] == ("bash", "-c") for run in runs)


def test_exec_path_constant():
    assert EXTRA_PATH == (
        "$PATH:/usr/local/sbin:/usr/local/bin:/usr/sbin:/usr/bin:/sbin:/bin"
        ":/opt/conda/bin:/usr/local/julia/bin:/opt/conda/envs/envd/bin"
    )


def test_exec_empty(make_spec):
    spec = make_spec()
    state = base_state(spec)
    assert CommandRunner().apply(spec, state) is state


def test_copy_instructions(make_spec):
    spec = make_spec(
        uid=1002,
        gid=1003,
        copy=[
            {"source": "a.txt", "destination": "/home/envd/a.txt"},
            {"source": "data/", "destination": "/data"},
        ],
    )
    state = FileStager().apply(spec, base_state(spec))

    copies = [step for step in state.steps if isinstance(step, CopyFromContext)]
    assert copies == [
        CopyFromContext("build-context", "a.txt", "/home/envd/a.txt", Owner(1002, 1003)),
        CopyFromContext("build-context", "data/", "/data", Owner(1002, 1003)),
    ]


def test_ssh_key(make_spec):
    spec = make_spec()
    state = CredentialInstaller().apply(spec, base_state(spec))

    mkdir, write = state.steps[-2:]
    assert mkdir.path == "/var/envd"
    assert mkdir.parents
    assert mkdir.owner == Owner(1000, 1000)
    assert write.path == "/var/envd/authorized_keys"
    assert write.data == b"ssh-ed25519 AAAA... envd"
    assert write.owner == Owner(1000, 1000)
    assert write.label == "install ssh keys"


def test_ssh_key_trims_a_single_newline(make_spec, tmp_path):
    key = tmp_path / "two.pub"
    key.write_text("ssh-rsa BBBB\n\n")
    spec = make_spec(public_key_path=key)

    state = CredentialInstaller().apply(spec, base_state(spec))
    assert state.steps[-1].data == b"ssh-rsa BBBB\n envd"


def test_ssh_key_missing(make_spec, tmp_path):
    spec = make_spec(public_key_path=tmp_path / "missing.pub")

    with pytest.raises(CredentialError) as exc:
        CredentialInstaller().apply(spec, base_state(spec))

    assert exc.value.code == "E_IO"
    assert exc.value.stage == "ssh-key"
    assert str(tmp_path / "missing.pub") in str(exc.value)


def test_ssh_key_keeps_raw_bytes(make_spec, tmp_path):
    key = tmp_path / "binary.pub"
    key.write_bytes(b"ssh-ed25519 \xff\xfe\n")
    spec = make_spec(public_key_path=key)

    state = CredentialInstaller().apply(spec, base_state(spec))
    assert state.steps[-1].data == b"ssh-ed25519 \xff\xfe envd"
