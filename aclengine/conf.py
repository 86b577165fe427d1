"""ACL Engine configuration.

Values are read through navconfig (``env/.env`` or environment variables).
"""
from pathlib import Path
from navconfig import config, BASE_DIR


# Namespace for environment attributes (``<base>project``, ``<base>application``)
ACL_ENV_URI_BASE = config.get(
    'ACL_ENV_URI_BASE',
    fallback='http://dtolabs.com/rundeck/env/'
)

PROJECT_CONTEXT_KEY = 'project'
APPLICATION_CONTEXT_KEY = 'application'

ACL_POLICY_EXTENSION = config.get('ACL_POLICY_EXTENSION', fallback='.aclpolicy')

_policy_dir = config.get('ACL_POLICY_DIR', fallback='etc/acl')
ACL_POLICY_DIR = Path(_policy_dir)
if not ACL_POLICY_DIR.is_absolute():
    ACL_POLICY_DIR = Path(BASE_DIR).joinpath(_policy_dir)

# thread pool size used when compiling several policy sources at once
ACL_LOAD_WORKERS = int(config.get('ACL_LOAD_WORKERS', fallback=4))
