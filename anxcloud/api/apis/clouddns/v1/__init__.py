"""CloudDNS API objects."""

from .zone import DNSServer, Revision, Zone

__all__ = ["DNSServer", "Revision", "Zone"]
