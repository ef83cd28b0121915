import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("routes", "0001_initial"),
        ("buses", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Trip",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("departure_time", models.DateTimeField(db_index=True)),
                ("arrival_time", models.DateTimeField()),
                (
                    "price",
                    models.DecimalField(
                        decimal_places=2,
                        max_digits=10,
                        validators=[django.core.validators.MinValueValidator(0)],
                    ),
                ),
                ("available_seats", models.PositiveIntegerField()),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("SCHEDULED", "Scheduled"),
                            ("IN_TRANSIT", "In transit"),
                            ("COMPLETED", "Completed"),
                            ("CANCELLED", "Cancelled"),
                            ("DELAYED", "Delayed"),
                        ],
                        db_index=True,
                        default="SCHEDULED",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "bus",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="trips", to="buses.bus"
                    ),
                ),
                (
                    "route",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT, related_name="trips", to="routes.route"
                    ),
                ),
            ],
            options={
                "db_table": "trips",
                "ordering": ["departure_time"],
                "indexes": [
                    models.Index(fields=["route", "departure_time"], name="trips_route_i_3f1c2a_idx"),
                    models.Index(fields=["status", "departure_time"], name="trips_status_8d2e4b_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("available_seats__gte", 0)),
                        name="trip_available_seats_non_negative",
                    )
                ],
            },
        ),
    ]
