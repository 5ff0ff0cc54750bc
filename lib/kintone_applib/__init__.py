from .env import KintoneCredentials, KintoneConfigError, find_root_dir, resolve_credentials
from .client import KintoneRestClient, KintoneRestAPIError, KintoneAllRecordsError, create_kintone_client
from .deploy import DeployStatus, WaitOutcome, DeployWaitCancelled, wait_for_deploy

__all__ = [
    "KintoneCredentials",
    "KintoneConfigError",
    "find_root_dir",
    "resolve_credentials",
    "KintoneRestClient",
    "KintoneRestAPIError",
    "KintoneAllRecordsError",
    "create_kintone_client",
    "DeployStatus",
    "WaitOutcome",
    "DeployWaitCancelled",
    "wait_for_deploy",
]
