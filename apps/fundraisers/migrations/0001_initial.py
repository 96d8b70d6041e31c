import uuid
from decimal import Decimal

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("organizations", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Fundraiser",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("name", models.CharField(max_length=255)),
                ("slug", models.SlugField(max_length=255, unique=True)),
                (
                    "kind",
                    models.CharField(
                        choices=[
                            ("ticketed_event", "Ticketed Event"),
                            ("donation_campaign", "Donation Campaign"),
                        ],
                        max_length=30,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("draft", "Draft"),
                            ("active", "Active"),
                            ("cancelled", "Cancelled"),
                        ],
                        db_index=True,
                        default="draft",
                        max_length=20,
                    ),
                ),
                (
                    "ticket_price",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=10, null=True),
                ),
                (
                    "capacity",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Maximum tickets; empty means unlimited",
                        null=True,
                    ),
                ),
                ("tickets_sold", models.PositiveIntegerField(default=0)),
                (
                    "goal_amount",
                    models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True),
                ),
                (
                    "current_amount",
                    models.DecimalField(decimal_places=2, default=Decimal("0"), max_digits=12),
                ),
                ("allow_recurring", models.BooleanField(default=False)),
                (
                    "organization",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="fundraisers",
                        to="organizations.organization",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
        migrations.CreateModel(
            name="Purchase",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "purchase_type",
                    models.CharField(
                        choices=[("ticket", "Ticket"), ("donation", "Donation")],
                        max_length=20,
                    ),
                ),
                ("purchaser_name", models.CharField(max_length=255)),
                ("purchaser_email", models.EmailField(blank=True, max_length=254)),
                ("purchaser_phone", models.CharField(blank=True, max_length=50)),
                (
                    "amount",
                    models.DecimalField(decimal_places=2, help_text="Gross amount", max_digits=10),
                ),
                (
                    "provider_fee",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Estimated Stripe processing fee",
                        max_digits=10,
                    ),
                ),
                ("platform_fee", models.DecimalField(decimal_places=2, max_digits=10)),
                (
                    "net_amount",
                    models.DecimalField(
                        decimal_places=2,
                        help_text="Gross minus fees; may be negative",
                        max_digits=10,
                    ),
                ),
                ("quantity", models.PositiveIntegerField(default=1)),
                ("is_recurring", models.BooleanField(default=False)),
                ("stripe_subscription_id", models.CharField(blank=True, max_length=255)),
                (
                    "stripe_checkout_session_id",
                    models.CharField(
                        help_text="Checkout session ID, e.g. 'cs_xxx'; idempotency key",
                        max_length=255,
                        unique=True,
                    ),
                ),
                (
                    "stripe_payment_intent_id",
                    models.CharField(blank=True, db_index=True, max_length=255),
                ),
                ("stripe_customer_id", models.CharField(blank=True, max_length=255)),
                (
                    "fulfillment_token",
                    models.CharField(
                        blank=True,
                        help_text="Unguessable ticket token for check-in",
                        max_length=64,
                        null=True,
                        unique=True,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("completed", "Completed"), ("refunded", "Refunded")],
                        db_index=True,
                        default="completed",
                        max_length=20,
                    ),
                ),
                ("refunded_at", models.DateTimeField(blank=True, null=True)),
                ("metadata", models.JSONField(blank=True, default=dict)),
                (
                    "fundraiser",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="purchases",
                        to="fundraisers.fundraiser",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
