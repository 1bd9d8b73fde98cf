# Generated manually for the initial periods schema

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('groups', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='MealPeriod',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=120)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, null=True)),
                ('status', models.CharField(choices=[('ACTIVE', 'Active'), ('ENDED', 'Ended'), ('LOCKED', 'Locked'), ('ARCHIVED', 'Archived')], default='ACTIVE', max_length=10)),
                ('is_locked', models.BooleanField(default=False)),
                ('opening_balance', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('closing_balance', models.DecimalField(blank=True, decimal_places=2, max_digits=12, null=True)),
                ('carry_forward', models.BooleanField(default=False)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_periods', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='periods', to='groups.group')),
            ],
            options={
                'db_table': 'meal_periods',
                'ordering': ['-start_date', '-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='mealperiod',
            index=models.Index(fields=['group', 'status'], name='meal_period_group_i_9113d2_idx'),
        ),
        migrations.AddIndex(
            model_name='mealperiod',
            index=models.Index(fields=['group', 'start_date'], name='meal_period_group_i_40d4b4_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='mealperiod',
            unique_together={('group', 'name')},
        ),
    ]
