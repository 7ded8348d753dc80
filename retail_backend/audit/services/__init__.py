# audit/services/__init__.py

from audit.services.audit_service import log_action

__all__ = ["log_action"]
