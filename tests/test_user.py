import pytest

from envd_compiler.errors import OwnershipError
from envd_compiler.plan import Owner, RunShell, SetUser
from envd_compiler.stages.base import BaseImageSelector
from envd_compiler.stages.user import UserProvisioner


def provision(spec):
    state = BaseImageSelector().apply(spec)
    return UserProvisioner().apply(spec, state)


def commands(state):
    return [step.command.argv for step in state.steps if isinstance(step, RunShell)]


def test_normal_user(make_spec):
    state = provision(make_spec(uid=1002, gid=1003))

    assert commands(state) == [
        ("groupadd", "-g", "1003", "envd"),
        ("useradd", "-p", "", "-u", "1002", "-g", "envd", "-s", "/bin/sh", "-m", "envd"),
        ("adduser", "envd", "sudo"),
        ("chown", "-R", "envd:envd", "/usr/local/lib"),
        ("chown", "-R", "envd:envd", "/opt/conda"),
    ]
    assert state.account == Owner(1002, 1003)
    assert state.user == "envd"
    assert state.steps[-1] == SetUser("envd")


def test_root_remap(make_spec):
    state = provision(make_spec(uid=0, gid=0))

    assert commands(state) == [
        ("groupadd", "-g", "1001", "envd"),
        ("useradd", "-p", "", "-u", "1001", "-g", "envd", "-s", "/bin/sh", "-m", "envd"),
        ("usermod", "-s", "/bin/sh", "root"),
        ("sed", "-i", "s/envd:x:1001:1001/envd:x:0:0/g", "/etc/passwd"),
        ("sed", "-i", "s./root./home/envd.g", "/etc/passwd"),
        ("sed", "-i", "s/envd:x:1001/envd:x:0/g", "/etc/group"),
        ("chown", "-R", "root:root", "/opt/conda"),
    ]
    assert state.account == Owner(0, 0)
    assert state.steps[-1] == SetUser("envd")


def test_root_remap_shell_rendering(make_spec):
    state = provision(make_spec(uid=0, gid=0))
    shells = [step.command.to_shell() for step in state.steps if isinstance(step, RunShell)]

    assert shells[1] == "useradd -p '' -u 1001 -g envd -s /bin/sh -m envd"
    assert shells[3] == "sed -i s/envd:x:1001:1001/envd:x:0:0/g /etc/passwd"


def test_r_base_collision_bumps_ids(make_spec):
    state = provision(make_spec(language={"name": "r"}, uid=1000, gid=1000))

    assert state.account == Owner(1001, 1001)
    assert commands(state)[0] == ("groupadd", "-g", "1001", "envd")
    assert "1000" not in " ".join(" ".join(argv) for argv in commands(state))


def test_other_bases_keep_1000(make_spec):
    state = provision(make_spec(language={"name": "python"}, uid=1000, gid=1000))
    assert state.account == Owner(1000, 1000)


def test_custom_image_is_not_provisioned(make_spec):
    spec = make_spec(image="ubuntu:22.04", uid=0, gid=0)
    base = BaseImageSelector().apply(spec)
    state = UserProvisioner().apply(spec, base)

    assert state is base
    assert state.user is None
    assert state.account == Owner(0, 0)


def test_sealed_account_cannot_change(make_spec):
    state = provision(make_spec()).seal_account()

    with pytest.raises(OwnershipError):
        state.provision(Owner(0, 0))


def test_gpu_r_environment_keeps_1000(make_spec):
    spec = make_spec(
        language={"name": "r"},
        accelerator={"driver_version": "11.2", "lib_version": "8"},
        uid=1000,
        gid=1000,
    )
    assert provision(spec).account == Owner(1000, 1000)
