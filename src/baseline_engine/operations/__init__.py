"""Engine commands. Each run_* function returns a report with to_dict() and summary()."""

from baseline_engine.operations.apply import ApplyReport, run_apply
from baseline_engine.operations.diff import DiffReport, run_diff
from baseline_engine.operations.doctor import DoctorReport, run_doctor
from baseline_engine.operations.init import InitReport, run_init
from baseline_engine.operations.upgrade import UpgradeReport, run_upgrade
from baseline_engine.operations.verify import VerifyReport, run_verify

__all__ = [
    "ApplyReport",
    "DiffReport",
    "DoctorReport",
    "InitReport",
    "UpgradeReport",
    "VerifyReport",
    "run_apply",
    "run_diff",
    "run_doctor",
    "run_init",
    "run_upgrade",
    "run_verify",
]
