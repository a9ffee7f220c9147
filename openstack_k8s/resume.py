"""Decide which step of the minor update procedure to resume from.

The minor update procedure is a fixed sequence of steps. Once the target
version has been set, the OpenStackVersion controller reports progress through
a set of MinorUpdate* conditions that stay not-ready until their phase is
done. Given a snapshot of the version fields and the not-ready condition
names, `decide_resume_step` picks the earliest unfinished phase:

```python
from openstack_k8s.resume import VersionSnapshot, decide_resume_step

snapshot = VersionSnapshot(
    target_version="1.0",
    available_version="1.0",
    deployed_version="0.9",
    not_ready_conditions=("MinorUpdateOVNDataplane",),
)
decision = decide_resume_step(snapshot)
assert decision.step == 5
```
"""

from dataclasses import dataclass
from enum import IntEnum

from .manifest import OpenStackVersion

__all__ = [
    "ResumeStep",
    "VersionSnapshot",
    "ResumeDecision",
    "decide_resume_step",
]


class ResumeStep(IntEnum):
    """Steps of the minor update procedure that can be resumed."""

    PRE_UPGRADE_VALIDATION = 2
    MONITOR_OVN_CONTROLPLANE = 4
    DEPLOY_OVN_DATAPLANE = 5
    MONITOR_CONTROLPLANE_UPDATE = 7
    DEPLOY_UPDATE_DATAPLANE = 8
    UPDATE_COMPLETE = 10

    @property
    def title(self) -> str:
        return STEP_TITLES[self]

    @property
    def label(self) -> str:
        return f"Step {self.value}: {self.title}"


STEP_TITLES: dict[ResumeStep, str] = {
    ResumeStep.PRE_UPGRADE_VALIDATION: "Pre-Upgrade Validation",
    ResumeStep.MONITOR_OVN_CONTROLPLANE: "Monitor OVN Controlplane Deployment",
    ResumeStep.DEPLOY_OVN_DATAPLANE: "Deploy OVN on Dataplane",
    ResumeStep.MONITOR_CONTROLPLANE_UPDATE: "Monitor Controlplane Update Completion",
    ResumeStep.DEPLOY_UPDATE_DATAPLANE: "Deploy Update on Dataplane",
    ResumeStep.UPDATE_COMPLETE: "Update Complete",
}

# Checked in order, the first not-ready condition found decides the step
CONDITION_STEPS: tuple[tuple[str, ResumeStep], ...] = (
    ("MinorUpdateOVNControlplane", ResumeStep.MONITOR_OVN_CONTROLPLANE),
    ("MinorUpdateOVNDataplane", ResumeStep.DEPLOY_OVN_DATAPLANE),
    ("MinorUpdateControlplane", ResumeStep.MONITOR_CONTROLPLANE_UPDATE),
    ("MinorUpdateDataplane", ResumeStep.DEPLOY_UPDATE_DATAPLANE),
)

NIL = "nil"


@dataclass(frozen=True)
class VersionSnapshot:
    """A single read of the version and condition fields of an OpenStackVersion."""

    target_version: str
    available_version: str | None = None
    deployed_version: str | None = None
    not_ready_conditions: tuple[str, ...] = ()

    @classmethod
    def from_version(cls, version: OpenStackVersion) -> "VersionSnapshot":
        """Build a snapshot from a parsed OpenStackVersion."""
        return cls(
            target_version=version.target_version,
            available_version=version.available_version,
            deployed_version=version.deployed_version,
            not_ready_conditions=tuple(version.not_ready_conditions),
        )

    @property
    def in_progress(self) -> bool:
        """True once the target version has been made available for deployment."""
        return (
            self.available_version is not None
            and self.target_version == self.available_version
        )

    @property
    def complete(self) -> bool:
        """True when the target version is deployed and every condition is ready."""
        return (
            self.deployed_version is not None
            and self.target_version == self.deployed_version
            and not self.not_ready_conditions
        )


@dataclass(frozen=True)
class ResumeDecision:
    """The step to resume from and why."""

    step: ResumeStep
    explanation: str


def _render(value: str | None) -> str:
    return NIL if value is None else value


def decide_resume_step(snapshot: VersionSnapshot) -> ResumeDecision:
    """Map a version snapshot onto the step of the procedure to resume from."""
    target = snapshot.target_version
    available = _render(snapshot.available_version)

    if not snapshot.in_progress:
        step = ResumeStep.PRE_UPGRADE_VALIDATION
        return ResumeDecision(
            step,
            f"Upgrade not in progress (targetVersion='{target}' != "
            f"availableVersion='{available}'). Start from {step.label}.",
        )

    if snapshot.complete:
        step = ResumeStep.UPDATE_COMPLETE
        return ResumeDecision(
            step,
            f"Upgrade complete (targetVersion='{target}' == "
            f"deployedVersion='{_render(snapshot.deployed_version)}' and all "
            f"conditions ready). Jump to {step.label}.",
        )

    prefix = (
        f"Upgrade in progress (targetVersion='{target}' == "
        f"availableVersion='{available}')."
    )
    for condition, step in CONDITION_STEPS:
        if condition in snapshot.not_ready_conditions:
            return ResumeDecision(
                step,
                f"{prefix} notReadyConditions contains '{condition}'. "
                f"Resume at {step.label}.",
            )

    step = ResumeStep.PRE_UPGRADE_VALIDATION
    return ResumeDecision(
        step,
        "Could not determine specific resume point from "
        f"notReadyConditions=[{' '.join(snapshot.not_ready_conditions)}]. "
        f"Starting from {step.label}.",
    )
