# audit/models/__init__.py

from audit.models.audit_log import AuditLog

__all__ = ["AuditLog"]
