from .audit_logger import AuditEventSerializer, AuditLogger

__all__ = [
    "AuditEventSerializer",
    "AuditLogger",
]
