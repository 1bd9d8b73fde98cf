# Generated manually for the initial votes schema

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('groups', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Vote',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('type', models.CharField(choices=[('MEAL_MANAGER', 'Meal manager'), ('MEAL_CHOICE', 'Meal choice'), ('ACCOUNTANT', 'Accountant'), ('ROOM_LEADER', 'Room leader'), ('MARKET_MANAGER', 'Market manager'), ('GROUP_DECISION', 'Group decision'), ('EVENT_ORGANIZER', 'Event organizer'), ('CLEANING_MANAGER', 'Cleaning manager'), ('TREASURER', 'Treasurer'), ('CUSTOM', 'Custom')], default='GROUP_DECISION', max_length=20)),
                ('options', models.JSONField(default=list)),
                ('results', models.JSONField(blank=True, default=dict)),
                ('is_active', models.BooleanField(default=True)),
                ('start_date', models.DateTimeField(default=django.utils.timezone.now)),
                ('end_date', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_votes', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='votes', to='groups.group')),
            ],
            options={
                'db_table': 'votes',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='vote',
            index=models.Index(fields=['group', 'is_active'], name='votes_group_i_c6fec6_idx'),
        ),
        migrations.AddIndex(
            model_name='vote',
            index=models.Index(fields=['end_date'], name='votes_end_dat_ea10d6_idx'),
        ),
    ]
