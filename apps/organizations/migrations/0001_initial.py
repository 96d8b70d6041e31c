import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = [
        ("accounts", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Organization",
            fields=[
                (
                    "id",
                    models.BigAutoField(
                        auto_created=True, primary_key=True, serialize=False, verbose_name="ID"
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("name", models.CharField(max_length=255)),
                (
                    "slug",
                    models.SlugField(
                        help_text="URL-safe public identifier, immutable once assigned",
                        max_length=255,
                        unique=True,
                    ),
                ),
                ("is_nonprofit", models.BooleanField(default=False)),
                (
                    "stripe_customer_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Stripe customer ID, e.g. 'cus_xxx'",
                        max_length=255,
                    ),
                ),
                (
                    "stripe_account_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Stripe connected account ID, e.g. 'acct_xxx'",
                        max_length=255,
                    ),
                ),
                (
                    "stripe_account_status",
                    models.CharField(
                        blank=True,
                        choices=[("pending", "Pending"), ("active", "Active")],
                        max_length=20,
                    ),
                ),
                (
                    "subscription_status",
                    models.CharField(
                        choices=[
                            ("none", "None"),
                            ("active", "Active"),
                            ("past_due", "Past Due"),
                            ("canceled", "Canceled"),
                        ],
                        db_index=True,
                        default="none",
                        max_length=20,
                    ),
                ),
                (
                    "price_id",
                    models.CharField(
                        blank=True,
                        help_text="Stripe price ID of the current plan, e.g. 'price_xxx'",
                        max_length=255,
                    ),
                ),
                ("plan_name", models.CharField(blank=True, max_length=100)),
                (
                    "platform_fee_percent",
                    models.DecimalField(
                        blank=True,
                        decimal_places=2,
                        help_text="Platform fee in percent, overrides the plan default",
                        max_digits=5,
                        null=True,
                    ),
                ),
                (
                    "owner",
                    models.OneToOneField(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="organization",
                        to="accounts.user",
                    ),
                ),
            ],
            options={
                "ordering": ["-created_at"],
            },
        ),
    ]
