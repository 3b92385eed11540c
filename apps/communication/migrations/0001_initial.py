import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='EmailTemplate',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('name', models.CharField(help_text='Event kind this template renders, e.g. violation_assigned', max_length=100, unique=True, verbose_name='template name')),
                ('description', models.CharField(blank=True, max_length=255, verbose_name='description')),
                ('subject', models.CharField(max_length=200, verbose_name='email subject')),
                ('body_html', models.TextField(help_text='HTML content for the email', verbose_name='HTML body')),
                ('body_text', models.TextField(blank=True, help_text='Plain text version of the email; generated from the HTML body when empty', verbose_name='text body')),
                ('is_active', models.BooleanField(default=True, verbose_name='is active')),
                ('variables', models.JSONField(blank=True, default=list, help_text='Names of the placeholders available to this template', verbose_name='template variables')),
            ],
            options={
                'verbose_name': 'Email Template',
                'verbose_name_plural': 'Email Templates',
                'ordering': ['name'],
            },
        ),
        migrations.CreateModel(
            name='SentEmail',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('event_kind', models.CharField(blank=True, choices=[('violation_assigned', 'Detention assigned'), ('detention_rescheduled', 'Detention rescheduled'), ('teacher_approved', 'Teacher account approved'), ('teacher_suspended', 'Teacher account suspended'), ('monitor_signup', 'Detention monitor signup'), ('monitor_reminder', 'Detention monitor reminder'), ('test', 'Test email')], db_index=True, max_length=40, verbose_name='event kind')),
                ('recipients', models.JSONField(default=list, verbose_name='recipients')),
                ('cc', models.JSONField(blank=True, default=list, verbose_name='cc')),
                ('subject', models.CharField(max_length=200, verbose_name='subject')),
                ('body_html', models.TextField(verbose_name='HTML body')),
                ('body_text', models.TextField(blank=True, verbose_name='text body')),
                ('sent_at', models.DateTimeField(auto_now_add=True, verbose_name='sent at')),
                ('success', models.BooleanField(default=False, verbose_name='success')),
                ('error_message', models.TextField(blank=True, verbose_name='error message')),
                ('message_id', models.CharField(blank=True, max_length=200, verbose_name='message ID')),
                ('template', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='sent_emails', to='communication.emailtemplate', verbose_name='template')),
            ],
            options={
                'verbose_name': 'Sent Email',
                'verbose_name_plural': 'Sent Emails',
                'ordering': ['-sent_at'],
                'indexes': [
                    models.Index(fields=['event_kind', 'sent_at'], name='communicati_event_k_5c1d2e_idx'),
                    models.Index(fields=['success'], name='communicati_success_8a4f0b_idx'),
                ],
            },
        ),
    ]
