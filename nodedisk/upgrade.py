"""Pre-upgrade tasks for block device claims and a runner for them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Protocol

OLD_BDC_FINALIZER = "blockdeviceclaim.finalizer"
NEW_BDC_FINALIZER = "openebs.io/bdc-protection"


class UpgradeError(Exception):
    """Raised when an upgrade task did not succeed."""


@dataclass
class BlockDeviceClaim:
    """The parts of a block device claim that upgrades touch."""

    name: str
    finalizers: list[str] = field(default_factory=list)
    host_name: str = ""
    node_host_name: str = ""


class ClaimClient(Protocol):
    """Access to the stored block device claims."""

    def list_claims(self) -> list[BlockDeviceClaim]: ...

    def update(self, claim: BlockDeviceClaim) -> None: ...


class Task(ABC):
    """One step of an upgrade."""

    @abstractmethod
    def pre_upgrade(self) -> bool:
        """Run the step; return True if it succeeded."""

    @abstractmethod
    def is_success(self) -> bool:
        """Return True if the step succeeded, else raise the error it met."""


def run_upgrade(*tasks: Task) -> None:
    """Run every task in order, stopping at the first that failed."""
    for task in tasks:
        task.pre_upgrade()
        try:
            task.is_success()
        except Exception as exc:
            raise UpgradeError(f"upgrade failed. Error : {exc}") from exc


class _ClaimTask(Task):
    """A task applying a change to every block device claim."""

    def __init__(self, from_version: str, to_version: str, client: ClaimClient) -> None:
        self.from_version = from_version
        self.to_version = to_version
        self.client = client
        self.error: Exception | None = None

    def pre_upgrade(self) -> bool:
        try:
            for claim in self.client.list_claims():
                self._apply(claim)
        except Exception as exc:
            self.error = exc
            return False
        return True

    def is_success(self) -> bool:
        if self.error is not None:
            raise self.error
        return True

    @abstractmethod
    def _apply(self, claim: BlockDeviceClaim) -> None:
        """Change one claim, updating it through the client if needed."""


class FinalizerRenameTask(_ClaimTask):
    """Replace the old claim finalizer with the new one."""

    def pre_upgrade(self) -> bool:
        return super().pre_upgrade()

    def is_success(self) -> bool:
        return super().is_success()

    def _apply(self, claim: BlockDeviceClaim) -> None:
        if OLD_BDC_FINALIZER in claim.finalizers:
            claim.finalizers = [f for f in claim.finalizers if f != OLD_BDC_FINALIZER]
            claim.finalizers.append(NEW_BDC_FINALIZER)
            self.client.update(claim)


class HostNameCopyTask(_ClaimTask):
    """Copy the claim's host name into its node attributes."""

    def pre_upgrade(self) -> bool:
        return super().pre_upgrade()

    def is_success(self) -> bool:
        return super().is_success()

    def _apply(self, claim: BlockDeviceClaim) -> None:
        if claim.host_name and not claim.node_host_name:
            claim.node_host_name = claim.host_name
            self.client.update(claim)