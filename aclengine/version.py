"""ACL Engine Meta information."""

__title__ = "aclengine"
__description__ = (
    "Access-control policy engine: YAML policy validation, "
    "rule compilation and tiered resource authorization."
)
__version__ = "0.4.1"
__author__ = "aclengine contributors"
__author_email__ = ""
__license__ = "MIT"
__copyright__ = "Copyright (c) 2025-2026 aclengine contributors"
