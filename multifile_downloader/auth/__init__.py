"""Authentication submodule – credential resolution and forum login."""

from multifile_downloader.auth.credentials import (
    AuthMode,
    CredentialRecord,
    CredentialResolver,
    CredentialStore,
    terminal_confirm,
    terminal_prompt,
    validate_credentials,
)
from multifile_downloader.auth.login import (
    AuthSession,
    AuthState,
    SessionAuthState,
    marker_predicate,
)

__all__ = [
    "AuthMode",
    "CredentialRecord",
    "CredentialResolver",
    "CredentialStore",
    "terminal_confirm",
    "terminal_prompt",
    "validate_credentials",
    "AuthSession",
    "AuthState",
    "SessionAuthState",
    "marker_predicate",
]
