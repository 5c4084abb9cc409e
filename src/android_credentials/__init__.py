"""
Android Credentials - Signing keystore lifecycle for Android apps.

Backs up stored keystores, computes certificate fingerprints, generates upload
keystores and exports PEPK-encrypted private keys, by orchestrating keytool
and Google's PEPK tool.

Quick Start:
    from android_credentials import (
        CertificateFingerprintService,
        KeystoreGenerationService,
    )

    secrets = await KeystoreGenerationService().create_upload_keystore(
        "upload.jks", "com.example.app", "Example"
    )
    fingerprints = await CertificateFingerprintService().compute_fingerprints(
        "upload.jks", secrets.keystore_password.get_secret_value(), secrets.key_alias
    )
"""

__version__ = "0.1.0"

from .backup import (
    KeystoreBackupService,
    format_keystore_credentials,
    log_keystore_credentials,
)
from .config import CredentialsConfig, get_env_var
from .credential_service import CredentialService, InMemoryCredentialService
from .download import ensure_tool
from .export import PrivateKeyExportService
from .fingerprints import (
    CertificateFingerprintService,
    colon_separated,
    fingerprints_from_certificate,
    report_fingerprints,
)
from .generation import KeystoreGenerationService, generate_keystore_secrets
from .models import (
    AndroidCredentialsError,
    CleanupError,
    CredentialError,
    CredentialIdentity,
    CredentialNotFoundError,
    CredentialRecord,
    FingerprintSet,
    KeyExportError,
    KeystoreSecrets,
    ProcessError,
    SessionProtocolError,
    ToolDownloadError,
    ToolError,
    ToolExecutionError,
    ToolNotFoundError,
    ToolResult,
)
from .process import ToolInvoker
from .reporting import Colors, LoggingReporter, NullReporter, Reporter
from .session import InteractiveToolSession, PasswordExchange, SessionState

__all__ = [
    "__version__",
    # Services
    "KeystoreBackupService",
    "CertificateFingerprintService",
    "KeystoreGenerationService",
    "PrivateKeyExportService",
    # Primitives
    "ToolInvoker",
    "InteractiveToolSession",
    "PasswordExchange",
    "SessionState",
    "ensure_tool",
    # Credential service
    "CredentialService",
    "InMemoryCredentialService",
    # Models
    "CredentialIdentity",
    "CredentialRecord",
    "KeystoreSecrets",
    "FingerprintSet",
    "ToolResult",
    # Exceptions
    "AndroidCredentialsError",
    "CredentialError",
    "CredentialNotFoundError",
    "ToolError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "ProcessError",
    "ToolDownloadError",
    "KeyExportError",
    "CleanupError",
    "SessionProtocolError",
    # Helpers
    "colon_separated",
    "fingerprints_from_certificate",
    "report_fingerprints",
    "generate_keystore_secrets",
    "format_keystore_credentials",
    "log_keystore_credentials",
    # Config and reporting
    "CredentialsConfig",
    "get_env_var",
    "Reporter",
    "LoggingReporter",
    "NullReporter",
    "Colors",
]
