"""
Custody layer — custody service client and idempotent account provisioning.
"""

from backend_wallet.custody.client import CdpCustodyService, CustodyService  # noqa: F401
from backend_wallet.custody.provisioner import Account, AccountProvisioner  # noqa: F401

__all__ = ["Account", "AccountProvisioner", "CdpCustodyService", "CustodyService"]
