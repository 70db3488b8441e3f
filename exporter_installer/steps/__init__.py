from .step_10_preflight import PreflightStep
from .step_20_provision_user import ProvisionUserStep
from .step_30_fetch_archive import FetchArchiveStep
from .step_40_install_files import InstallFilesStep
from .step_50_materialize_config import MaterializeConfigStep
from .step_55_apply_ownership import ApplyOwnershipStep
from .step_60_cleanup_scratch import CleanupScratchStep
from .step_70_register_service import RegisterServiceStep
from .step_80_verify_port import VerifyPortStep

__all__ = [
    "PreflightStep",
    "ProvisionUserStep",
    "FetchArchiveStep",
    "InstallFilesStep",
    "MaterializeConfigStep",
    "ApplyOwnershipStep",
    "CleanupScratchStep",
    "RegisterServiceStep",
    "VerifyPortStep",
]
