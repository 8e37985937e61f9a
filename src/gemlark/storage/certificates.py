# =============================================================================
# Client Certificate Registry
# =============================================================================
# Client certificates are created by the user, outside gemlark, as a pair of
# PEM files named after the host:
#
#   <cert-dir>/<host>.crt
#   <cert-dir>/<host>.key
#
# When both files exist the pair is presented during the TLS handshake with
# that host. Nothing else about their lifecycle is managed here.
# =============================================================================

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ClientCertificate:
    """Paths of a host's certificate and private key."""
    host: str
    cert_path: Path
    key_path: Path


class CertificateRegistry:
    """
    Looks up client certificates by host.

    Usage:
        >>> registry = CertificateRegistry(Path("~/.local/share/gemlark/certs"))
        >>> registry.lookup("example.org") is None
        True
    """

    def __init__(self, cert_dir: Path) -> None:
        self.cert_dir = cert_dir

    def paths_for(self, host: str) -> tuple[Path, Path]:
        """Where the certificate and key for `host` are expected."""
        return self.cert_dir / f"{host}.crt", self.cert_dir / f"{host}.key"

    def lookup(self, host: str) -> ClientCertificate | None:
        """The registered pair for `host`, or None unless both files exist."""
        cert_path, key_path = self.paths_for(host)
        if cert_path.is_file() and key_path.is_file():
            return ClientCertificate(host=host, cert_path=cert_path, key_path=key_path)
        return None

    def generation_hint(self, host: str) -> list[str]:
        """
        Instructions for creating a certificate for `host`.

        Returns:
            Lines of text suitable for showing in the pager.
        """
        cert_path, key_path = self.paths_for(host)
        return [
            f"{host} requires a client certificate.",
            "",
            "Create one with:",
            "",
            f"  mkdir -p {self.cert_dir}",
            "  openssl req -x509 -newkey rsa:2048 -nodes -days 3650 \\",
            f"    -subj '/CN={host}' \\",
            f"    -keyout {key_path} \\",
            f"    -out {cert_path}",
        ]
