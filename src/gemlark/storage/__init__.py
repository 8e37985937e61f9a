# =============================================================================
# Storage Module
# =============================================================================
# Small persisted stores used by the pager and the protocol client:
#   - BookmarkStore: plain-text bookmark list
#   - CertificateRegistry: per-host client certificate lookup
# =============================================================================

from gemlark.storage.bookmarks import Bookmark, BookmarkStore
from gemlark.storage.certificates import CertificateRegistry, ClientCertificate

__all__ = ["Bookmark", "BookmarkStore", "CertificateRegistry", "ClientCertificate"]
