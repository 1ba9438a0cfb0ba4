"""Provisioning of the non-root 'envd' account."""

from __future__ import annotations

import logging
from typing import List

from ..config import SpecModel
from ..plan import BuildState, Owner, RunShell, SetUser, ShellCommand

logger = logging.getLogger(__name__)

USER_NAME = "envd"
HOME_DIR = f"/home/{USER_NAME}"

# Placeholder id for the account that is later rewritten to root.
PLACEHOLDER_ID = 1001

# The r-base image already has a group with this id.
R_BASE_EXISTING_ID = 1000

OWNED_DIRS = ("/usr/local/lib", "/opt/conda")
RUNTIME_DIR = "/opt/conda"


def _run(label: str, *argv: str) -> RunShell:
    return RunShell(ShellCommand.of(*argv), label=f"[internal] {label}")


def _create_account(uid: int, gid: int) -> List[RunShell]:
    return [
        _run("create user group envd", "groupadd", "-g", str(gid), USER_NAME),
        _run(
            "create user envd",
            "useradd", "-p", "", "-u", str(uid), "-g", USER_NAME,
            "-s", "/bin/sh", "-m", USER_NAME,
        ),
        _run("add user envd to sudoers", "adduser", USER_NAME, "sudo"),
    ] + [
        _run("configure user permissions", "chown", "-R", f"{USER_NAME}:{USER_NAME}", path)
        for path in OWNED_DIRS
    ]


def _remap_root() -> List[RunShell]:
    # Order matters: each substitution matches text left by the previous one.
    pid = PLACEHOLDER_ID
    return [
        _run("still create group envd for root context",
             "groupadd", "-g", str(pid), USER_NAME),
        _run(
            "still create user envd for root context",
            "useradd", "-p", "", "-u", str(pid), "-g", USER_NAME,
            "-s", "/bin/sh", "-m", USER_NAME,
        ),
        _run("set root default shell to /bin/sh", "usermod", "-s", "/bin/sh", "root"),
        _run("set envd uid to 0 as root",
             "sed", "-i", f"s/{USER_NAME}:x:{pid}:{pid}/{USER_NAME}:x:0:0/g", "/etc/passwd"),
        _run("set root home dir to /home/envd",
             "sed", "-i", f"s./root.{HOME_DIR}.g", "/etc/passwd"),
        _run("set envd group to 0 as root group",
             "sed", "-i", f"s/{USER_NAME}:x:{pid}/{USER_NAME}:x:0/g", "/etc/group"),
        _run("configure user permissions", "chown", "-R", "root:root", RUNTIME_DIR),
    ]


class UserProvisioner:
    """Creates the envd account, or remaps it to root when uid is 0.

    This is the only stage allowed to resolve uid/gid. Custom base images
    are left untouched and keep the caller's ids.
    """

    name = "user"

    def resolve(self, state: BuildState) -> Owner:
        uid, gid = state.account.uid, state.account.gid
        if state.base.family == "r":
            if gid == R_BASE_EXISTING_ID:
                gid = PLACEHOLDER_ID
            if uid == R_BASE_EXISTING_ID:
                uid = PLACEHOLDER_ID
        return Owner(uid, gid)

    def apply(self, spec: SpecModel, state: BuildState) -> BuildState:
        if state.base.custom:
            return state

        account = self.resolve(state)
        if account.uid == 0:
            logger.debug("remapping user %s to root", USER_NAME)
            steps = _remap_root()
            account = Owner(0, 0)
        else:
            logger.debug("creating user %s with uid=%d gid=%d", USER_NAME, account.uid, account.gid)
            steps = _create_account(account.uid, account.gid)

        return state.provision(account, user=USER_NAME).then(*steps, SetUser(USER_NAME))
