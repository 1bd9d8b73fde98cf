# Generated manually for the initial groups schema

import uuid
from django.conf import settings
from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Group',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('name', models.CharField(max_length=100)),
                ('description', models.TextField(blank=True)),
                ('is_private', models.BooleanField(default=False)),
                ('password', models.CharField(blank=True, max_length=128)),
                ('max_members', models.PositiveIntegerField(default=20)),
                ('member_count', models.PositiveIntegerField(default=0)),
                ('period_mode', models.CharField(choices=[('MONTHLY', 'Monthly'), ('CUSTOM', 'Custom')], default='MONTHLY', max_length=10)),
                ('features', models.JSONField(blank=True, default=dict)),
                ('fine_amount', models.DecimalField(decimal_places=2, default=0, max_digits=12)),
                ('fine_enabled', models.BooleanField(default=False)),
                ('is_active', models.BooleanField(default=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_groups', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'groups',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='GroupMembership',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('role', models.CharField(choices=[('ADMIN', 'Admin'), ('MODERATOR', 'Moderator'), ('MANAGER', 'Manager'), ('LEADER', 'Leader'), ('MEAL_MANAGER', 'Meal manager'), ('ACCOUNTANT', 'Accountant'), ('MARKET_MANAGER', 'Market manager'), ('MEMBER', 'Member'), ('BANNED', 'Banned')], default='MEMBER', max_length=20)),
                ('is_current', models.BooleanField(default=False)),
                ('is_banned', models.BooleanField(default=False)),
                ('permissions', models.JSONField(blank=True, default=dict)),
                ('notification_settings', models.JSONField(blank=True, default=dict)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='memberships', to='groups.group')),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='group_memberships', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'group_memberships',
                'ordering': ['joined_at'],
            },
        ),
        migrations.CreateModel(
            name='JoinRequest',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], default='PENDING', max_length=10)),
                ('message', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='join_requests', to='groups.group')),
                ('processed_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='processed_join_requests', to=settings.AUTH_USER_MODEL)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='join_requests', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'group_join_requests',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='InviteToken',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('token', models.CharField(db_index=True, max_length=10, unique=True)),
                ('role', models.CharField(choices=[('ADMIN', 'Admin'), ('MODERATOR', 'Moderator'), ('MANAGER', 'Manager'), ('LEADER', 'Leader'), ('MEAL_MANAGER', 'Meal manager'), ('ACCOUNTANT', 'Accountant'), ('MARKET_MANAGER', 'Market manager'), ('MEMBER', 'Member'), ('BANNED', 'Banned')], default='MEMBER', max_length=20)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('used_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('created_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='created_invite_tokens', to=settings.AUTH_USER_MODEL)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invite_tokens', to='groups.group')),
                ('used_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='used_invite_tokens', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'group_invite_tokens',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Invitation',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('email', models.EmailField(max_length=255)),
                ('token', models.CharField(db_index=True, max_length=64, unique=True)),
                ('role', models.CharField(choices=[('ADMIN', 'Admin'), ('MODERATOR', 'Moderator'), ('MANAGER', 'Manager'), ('LEADER', 'Leader'), ('MEAL_MANAGER', 'Meal manager'), ('ACCOUNTANT', 'Accountant'), ('MARKET_MANAGER', 'Market manager'), ('MEMBER', 'Member'), ('BANNED', 'Banned')], default='MEMBER', max_length=20)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('ACCEPTED', 'Accepted'), ('EXPIRED', 'Expired')], default='PENDING', max_length=10)),
                ('expires_at', models.DateTimeField()),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='invitations', to='groups.group')),
                ('invited_by', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_invitations', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'group_invitations',
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='GroupActivityLog',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('type', models.CharField(choices=[('GROUP_CREATED', 'Group created'), ('GROUP_UPDATED', 'Group updated'), ('MEMBER_JOINED', 'Member joined'), ('MEMBER_LEFT', 'Member left'), ('MEMBER_REMOVED', 'Member removed'), ('ROLE_CHANGED', 'Role changed'), ('INVITE_CREATED', 'Invite created'), ('INVITATIONS_SENT', 'Invitations sent'), ('JOIN_REQUEST_PROCESSED', 'Join request processed'), ('PERIOD_MODE_CHANGED', 'Period mode changed')], max_length=30)),
                ('details', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('group', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='activity_logs', to='groups.group')),
                ('user', models.ForeignKey(null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='group_activities', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'db_table': 'group_activity_logs',
                'ordering': ['-created_at'],
            },
        ),
        # Create indexes for Group
        migrations.AddIndex(
            model_name='group',
            index=models.Index(fields=['created_by', 'created_at'], name='groups_created_ccfbf6_idx'),
        ),
        migrations.AddIndex(
            model_name='group',
            index=models.Index(fields=['is_private', 'is_active'], name='groups_is_priv_92cfeb_idx'),
        ),
        # Create indexes and unique constraint for GroupMembership
        migrations.AddIndex(
            model_name='groupmembership',
            index=models.Index(fields=['group', 'role'], name='group_membe_group_i_bcefbf_idx'),
        ),
        migrations.AddIndex(
            model_name='groupmembership',
            index=models.Index(fields=['user', 'is_current'], name='group_membe_user_id_c97760_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='groupmembership',
            unique_together={('user', 'group')},
        ),
        # Create index and unique constraint for JoinRequest
        migrations.AddIndex(
            model_name='joinrequest',
            index=models.Index(fields=['group', 'status'], name='group_join__group_i_5db5b3_idx'),
        ),
        migrations.AlterUniqueTogether(
            name='joinrequest',
            unique_together={('user', 'group')},
        ),
        migrations.AddIndex(
            model_name='invitation',
            index=models.Index(fields=['group', 'email', 'status'], name='group_invit_group_i_e50863_idx'),
        ),
        migrations.AddIndex(
            model_name='groupactivitylog',
            index=models.Index(fields=['group', 'created_at'], name='group_activ_group_i_8e4d0d_idx'),
        ),
    ]
