from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Product",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("id", models.CharField(max_length=64, primary_key=True, serialize=False)),
                (
                    "sport",
                    models.CharField(
                        choices=[("basketball", "Basketball"), ("soccer", "Soccer"), ("nfl", "NFL")],
                        db_index=True,
                        default="basketball",
                        max_length=16,
                    ),
                ),
                ("title", models.CharField(max_length=200)),
                ("player", models.CharField(default="Unknown", max_length=120)),
                ("price_cents", models.PositiveIntegerField(default=0)),
                ("stock", models.IntegerField(default=0)),
                ("image", models.CharField(blank=True, max_length=500)),
                ("image2", models.CharField(blank=True, max_length=500)),
                ("great_deal", models.BooleanField(db_index=True, default=False)),
                ("autograph", models.BooleanField(default=False)),
                ("is_active", models.BooleanField(db_index=True, default=True)),
            ],
            options={
                "ordering": ["-created_at", "id"],
                "indexes": [models.Index(fields=["sport", "is_active"], name="catalog_pro_sport_8d1c2e_idx")],
                "constraints": [
                    models.CheckConstraint(condition=models.Q(stock__gte=0), name="product_stock_non_negative"),
                    models.CheckConstraint(condition=models.Q(price_cents__gte=0), name="product_price_non_negative"),
                ],
            },
        ),
    ]
