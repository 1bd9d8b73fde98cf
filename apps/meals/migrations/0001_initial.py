# Generated manually for the initial meals schema

import datetime
import uuid
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('groups', '0001_initial'),
        ('periods', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Meal',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField()),
                ('type', models.CharField(choices=[('BREAKFAST', 'Breakfast'), ('LUNCH', 'Lunch'), ('DINNER', 'Dinner')], max_length=10)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meals', to='groups.group')),
                ('period', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='meals', to='periods.mealperiod')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='meals', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'meals',
                'ordering': ['-date', 'type'],
            },
        ),
        migrations.CreateModel(
            name='GuestMeal',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField()),
                ('type', models.CharField(choices=[('BREAKFAST', 'Breakfast'), ('LUNCH', 'Lunch'), ('DINNER', 'Dinner')], max_length=10)),
                ('count', models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='guest_meals', to='groups.group')),
                ('period', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='guest_meals', to='periods.mealperiod')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='guest_meals', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'guest_meals',
                'ordering': ['-date', 'type'],
            },
        ),
        migrations.CreateModel(
            name='MealSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('breakfast_time', models.TimeField(default=datetime.time(8, 0))),
                ('lunch_time', models.TimeField(default=datetime.time(13, 0))),
                ('dinner_time', models.TimeField(default=datetime.time(20, 0))),
                ('auto_meal_enabled', models.BooleanField(default=False)),
                ('meal_cutoff_time', models.TimeField(default=datetime.time(22, 0))),
                ('max_meals_per_day', models.PositiveSmallIntegerField(default=3)),
                ('allow_guest_meals', models.BooleanField(default=True)),
                ('guest_meal_limit', models.PositiveSmallIntegerField(default=5)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('group', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='meal_settings', to='groups.group')),
            ],
            options={
                'verbose_name_plural': 'meal settings',
                'db_table': 'meal_settings',
            },
        ),
        migrations.CreateModel(
            name='AutoMealSettings',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('is_enabled', models.BooleanField(default=False)),
                ('breakfast_enabled', models.BooleanField(default=True)),
                ('lunch_enabled', models.BooleanField(default=True)),
                ('dinner_enabled', models.BooleanField(default=True)),
                ('guest_meal_enabled', models.BooleanField(default=False)),
                ('start_date', models.DateField(blank=True, null=True)),
                ('end_date', models.DateField(blank=True, null=True)),
                ('excluded_dates', models.JSONField(blank=True, default=list)),
                ('excluded_meal_types', models.JSONField(blank=True, default=list)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='auto_meal_settings', to='groups.group')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='auto_meal_settings', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name_plural': 'auto meal settings',
                'db_table': 'auto_meal_settings',
            },
        ),
        # Create indexes and unique constraints for Meal
        migrations.AddIndex(
            model_name='meal',
            index=models.Index(fields=['group', 'date'], name='meals_group_i_d56460_idx'),
        ),
        migrations.AddIndex(
            model_name='meal',
            index=models.Index(fields=['group', 'period'], name='meals_group_i_8ae817_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='meal',
            unique_together={('user', 'group', 'date', 'type')},
        ),
        migrations.AddIndex(
            model_name='guestmeal',
            index=models.Index(fields=['group', 'date'], name='guest_meals_group_i_63667b_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='guestmeal',
            unique_together={('user', 'group', 'date', 'type')},
        ),
        migrations.AlterUniqueTogether(
            name='automealsettings',
            unique_together={('user', 'group')},
        ),
    ]
