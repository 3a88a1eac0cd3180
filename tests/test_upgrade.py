import pytest

from nodedisk.upgrade import (
    NEW_BDC_FINALIZER,
    OLD_BDC_FINALIZER,
    BlockDeviceClaim,
    FinalizerRenameTask,
    HostNameCopyTask,
    Task,
    UpgradeError,
    run_upgrade,
)


class FakeClient:
    def __init__(self, claims, fail_list=False, fail_update=False):
        self.claims = claims
        self.fail_list = fail_list
        self.fail_update = fail_update
        self.updated = []

    def list_claims(self):
        if self.fail_list:
            raise RuntimeError("list failed")
        return self.claims

    def update(self, claim):
        if self.fail_update:
            raise RuntimeError("update failed")
        self.updated.append(claim.name)


def test_finalizer_rename():
    old = BlockDeviceClaim("a", finalizers=[OLD_BDC_FINALIZER, "x", OLD_BDC_FINALIZER])
    other = BlockDeviceClaim("b", finalizers=["x"])
    client = FakeClient([old, other])
    task = FinalizerRenameTask("0.4.0", "0.4.1", client)
    assert task.pre_upgrade() is True
    assert task.is_success() is True
    assert old.finalizers == ["x", NEW_BDC_FINALIZER]
    assert other.finalizers == ["x"]
    assert client.updated == ["a"]


def test_host_name_copy():
    needs_copy = BlockDeviceClaim("a", host_name="node-1")
    already_set = BlockDeviceClaim("b", host_name="node-1", node_host_name="node-2")
    empty = BlockDeviceClaim("c")
    client = FakeClient([needs_copy, already_set, empty])
    task = HostNameCopyTask("0.4.1", "0.4.2", client)
    assert task.pre_upgrade() is True
    assert needs_copy.node_host_name == "node-1"
    assert already_set.node_host_name == "node-2"
    assert empty.node_host_name == ""
    assert client.updated == ["a"]


def test_list_failure_recorded():
    task = HostNameCopyTask("0.4.1", "0.4.2", FakeClient([], fail_list=True))
    assert task.pre_upgrade() is False
    with pytest.raises(RuntimeError, match="list failed"):
        task.is_success()


def test_run_upgrade_success():
    claim = BlockDeviceClaim("a", finalizers=[OLD_BDC_FINALIZER], host_name="n")
    client = FakeClient([claim])
    run_upgrade(
        FinalizerRenameTask("0.4.0", "0.4.1", client),
        HostNameCopyTask("0.4.1", "0.4.2", client),
    )
    assert claim.finalizers == [NEW_BDC_FINALIZER]
    assert claim.node_host_name == "n"


def test_run_upgrade_stops_on_failure():
    claim = BlockDeviceClaim("a", finalizers=[OLD_BDC_FINALIZER], host_name="n")
    failing = FakeClient([claim], fail_update=True)
    second = FakeClient([BlockDeviceClaim("b", host_name="n")])
    with pytest.raises(UpgradeError, match="upgrade failed. Error : update failed"):
        run_upgrade(
            FinalizerRenameTask("0.4.0", "0.4.1", failing),
            HostNameCopyTask("0.4.1", "0.4.2", second),
        )
    assert second.updated == []


def test_run_upgrade_with_custom_task():
    class Recording(Task):
        def __init__(self):
            self.ran = False

        def pre_upgrade(self):
            self.ran = True
            return True

        def is_success(self):
            return True

    task = Recording()
    run_upgrade(task)
    assert task.ran is True