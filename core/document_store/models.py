"""
Yardbook Document Store — Stored Document Model
================================================
One row per (collection, doc_id). The document body is a JSON object.

This file contains NO business logic. The engines own every field
inside `data`; the store only persists and filters.
"""

import uuid

from django.db import models


class StoredDocument(models.Model):
    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    collection = models.CharField(
        max_length=100,
        help_text="Logical collection (invoices, orders, customers, ...).",
    )

    doc_id = models.CharField(
        max_length=255,
        help_text="Document id, unique within its collection.",
    )

    data = models.JSONField(
        default=dict,
        help_text="Document body. Money fields are cent-rounded numbers.",
    )

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = "yardbook_documents"
        ordering = ["collection", "doc_id"]
        constraints = [
            models.UniqueConstraint(
                fields=("collection", "doc_id"),
                name="uq_doc_collection_doc_id",
            ),
        ]
        indexes = [
            models.Index(
                fields=["collection", "updated_at"],
                name="idx_doc_collection_updated",
            ),
        ]

    def __str__(self):
        return f"{self.collection}/{self.doc_id}"
