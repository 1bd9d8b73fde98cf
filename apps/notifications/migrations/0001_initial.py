# Generated manually for the initial notifications schema

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
            name='Notification',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('GENERAL', 'General'), ('MEAL_ADDED', 'Meal added'), ('MEAL_REMINDER', 'Meal reminder'), ('PAYMENT_CREATED', 'Payment created'), ('PAYMENT_RECEIVED', 'Payment received'), ('EXPENSE_ADDED', 'Expense added'), ('SHOPPING_ADDED', 'Shopping added'), ('MARKET_DATE_ASSIGNED', 'Market date assigned'), ('MARKET_DATE_UPDATED', 'Market date updated'), ('PERIOD_STARTED', 'Period started'), ('PERIOD_ENDED', 'Period ended'), ('PERIOD_LOCKED', 'Period locked'), ('MEMBER_ADDED', 'Member added'), ('MEMBER_REMOVED', 'Member removed'), ('JOIN_REQUEST', 'Join request'), ('JOIN_REQUEST_APPROVED', 'Join request approved'), ('JOIN_REQUEST_REJECTED', 'Join request rejected'), ('ROLE_CHANGED', 'Role changed'), ('VOTE_STARTED', 'Vote started'), ('VOTE_ENDED', 'Vote ended')], default='GENERAL', max_length=30)),
                ('message', models.TextField()),
                ('read', models.BooleanField(default=False)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('group', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to='groups.group')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'notifications',
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddIndex(
            model_name='notification',
            index=models.Index(fields=['user', 'read', 'created_at'], name='notificatio_user_id_7fdccd_idx'),
        ),
    ]
