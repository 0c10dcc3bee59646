"""
Yardbook Core — Document Store App Configuration
=================================================
Django-backed implementation of the document store collaborator.

This app:
- Persists JSON documents keyed by (collection, doc_id)
- Supports merge and replace writes
- Filters with the store's where-clause operators

This app does NOT:
- Interpret document fields
- Derive totals, balances or statuses
"""

from django.apps import AppConfig


class DocumentStoreConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.document_store"
    label = "document_store"
    verbose_name = "Yardbook Document Store"
