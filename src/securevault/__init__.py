# SecureVault - Main Package
#
# Personal password vault with two independent secrets:
# a login secret for API access and a master secret that authorizes
# every encryption and decryption of stored entries.

__version__ = "0.1.0"
__author__ = "SecureVault Team"
__description__ = "Dual-secret personal password vault"

__all__ = ["__version__"]
