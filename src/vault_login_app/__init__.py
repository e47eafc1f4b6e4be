"""docker-credential-vault-login executable."""

__version__ = "0.1.0"
