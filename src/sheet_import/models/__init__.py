"""Database models"""
from src.sheet_import.models.base import Base
from src.sheet_import.models.imported_record import ImportedRecord
from src.sheet_import.models.audit_log import AuditLog

__all__ = ["Base", "ImportedRecord", "AuditLog"]
