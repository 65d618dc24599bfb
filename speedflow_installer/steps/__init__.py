from .step_10_check_requirements import CheckRequirementsStep
from .step_20_git_safety import GitSafetyStep
from .step_30_verify_remote_access import VerifyRemoteAccessStep
from .step_40_install_bundle import InstallBundleStep
from .step_50_verify_installation import VerifyInstallationStep

__all__ = [
    "CheckRequirementsStep",
    "GitSafetyStep",
    "VerifyRemoteAccessStep",
    "InstallBundleStep",
    "VerifyInstallationStep",
]
