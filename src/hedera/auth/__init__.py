"""OAuth2 credential acquisition."""

from hedera.auth.oauth import Credential, CredentialProvider

__all__ = ["Credential", "CredentialProvider"]
