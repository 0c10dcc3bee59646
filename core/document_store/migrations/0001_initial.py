import uuid

from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="StoredDocument",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "collection",
                    models.CharField(
                        help_text="Logical collection (invoices, orders, customers, ...).",
                        max_length=100,
                    ),
                ),
                (
                    "doc_id",
                    models.CharField(
                        help_text="Document id, unique within its collection.",
                        max_length=255,
                    ),
                ),
                (
                    "data",
                    models.JSONField(
                        default=dict,
                        help_text="Document body. Money fields are cent-rounded numbers.",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "yardbook_documents",
                "ordering": ["collection", "doc_id"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("collection", "doc_id"),
                        name="uq_doc_collection_doc_id",
                    )
                ],
                "indexes": [
                    models.Index(
                        fields=["collection", "updated_at"],
                        name="idx_doc_collection_updated",
                    )
                ],
            },
        ),
    ]
