import django.db.models.deletion
import uuid
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('core', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Reservation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(choices=[('Personal', 'Personal'), ('Shared', 'Shared'), ('Maintenance', 'Maintenance')], max_length=20)),
                ('start_time', models.DateTimeField()),
                ('end_time', models.DateTimeField()),
                ('notes', models.TextField(blank=True)),
                ('start_hobbs', models.DecimalField(blank=True, decimal_places=1, max_digits=8, null=True)),
                ('end_hobbs', models.DecimalField(blank=True, decimal_places=1, max_digits=8, null=True)),
                ('completed_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('aircraft', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reservations', to='core.aircraft')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='reservations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['start_time'],
                'indexes': [models.Index(fields=['aircraft', 'start_time', 'end_time'], name='reservation_aircraft_range')],
                'constraints': [
                    models.CheckConstraint(condition=models.Q(('end_time__gt', models.F('start_time'))), name='reservation_end_after_start'),
                    models.CheckConstraint(condition=models.Q(('start_hobbs__isnull', True), ('end_hobbs__isnull', True), ('end_hobbs__gte', models.F('start_hobbs')), _connector='OR'), name='reservation_hobbs_non_decreasing'),
                ],
            },
        ),
    ]
