import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Route",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("origin_city", models.CharField(db_index=True, max_length=100)),
                ("destination_city", models.CharField(db_index=True, max_length=100)),
                ("distance", models.PositiveIntegerField(help_text="Distance in kilometres")),
                ("estimated_duration", models.PositiveIntegerField(help_text="Estimated duration in minutes")),
                (
                    "base_price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
            ],
            options={
                "db_table": "routes",
                "ordering": ["origin_city", "destination_city"],
                "constraints": [
                    models.UniqueConstraint(
                        fields=("origin_city", "destination_city"), name="unique_route_city_pair"
                    )
                ],
            },
        ),
    ]
