# Generated manually for the initial shopping schema

import uuid
from decimal import Decimal
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
            name='ShoppingItem',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=200)),
                ('quantity', models.DecimalField(decimal_places=2, default=Decimal('0.00'), max_digits=12, validators=[MinValueValidator(Decimal('0.00'))])),
                ('unit', models.CharField(blank=True, max_length=20)),
                ('purchased', models.BooleanField(default=False)),
                ('date', models.DateField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='shopping_items', to='groups.group')),
                ('period', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shopping_items', to='periods.mealperiod')),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='shopping_items', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'shopping_items',
                'ordering': ['-date', '-created_at'],
            },
        ),
        migrations.CreateModel(
            name='MarketDate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('date', models.DateField()),
                ('status', models.CharField(choices=[('UPCOMING', 'Upcoming'), ('IN_PROGRESS', 'In progress'), ('COMPLETED', 'Completed'), ('CANCELLED', 'Cancelled')], default='UPCOMING', max_length=12)),
                ('fined', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='assigned_market_dates', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='market_dates', to='groups.group')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='market_dates', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'market_dates',
                'ordering': ['date'],
            },
        ),
        migrations.AddIndex(
            model_name='shoppingitem',
            index=models.Index(fields=['group', 'date'], name='shopping_it_group_i_831f34_idx'),
        ),
        migrations.AddIndex(
            model_name='shoppingitem',
            index=models.Index(fields=['group', 'period', 'purchased'], name='shopping_it_group_i_089a8a_idx'),
        ),
        migrations.AddIndex(
            model_name='marketdate',
            index=models.Index(fields=['group', 'date'], name='market_date_group_i_414691_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='marketdate',
            unique_together={('group', 'user', 'date')},
        ),
    ]
