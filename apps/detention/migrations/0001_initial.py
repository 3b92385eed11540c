import uuid

import apps.detention.models
import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('students', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DetentionSlot',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('date', models.DateField(db_index=True, verbose_name='date')),
                ('location', models.CharField(default=apps.detention.models.default_location, max_length=100, verbose_name='location')),
                ('capacity', models.PositiveIntegerField(default=apps.detention.models.default_capacity, validators=[django.core.validators.MinValueValidator(1)], verbose_name='capacity')),
                ('current_count', models.PositiveIntegerField(default=0, editable=False, verbose_name='seats taken')),
                ('teacher', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='detention_slots', to=settings.AUTH_USER_MODEL, verbose_name='monitoring teacher')),
            ],
            options={
                'verbose_name': 'Detention Slot',
                'verbose_name_plural': 'Detention Slots',
                'ordering': ['date', 'created_at'],
                'constraints': [
                    models.UniqueConstraint(fields=('teacher', 'date'), name='unique_slot_per_teacher_per_day'),
                    models.CheckConstraint(condition=models.Q(('capacity__gte', 1)), name='slot_capacity_positive'),
                    models.CheckConstraint(condition=models.Q(('current_count__lte', models.F('capacity'))), name='slot_occupancy_within_capacity'),
                ],
            },
        ),
        migrations.CreateModel(
            name='StudentWarning',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('violation_type', models.CharField(max_length=100, verbose_name='violation type')),
                ('issued_at', models.DateTimeField(default=django.utils.timezone.now, verbose_name='issued at')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='warnings', to='students.student', verbose_name='student')),
                ('teacher', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='issued_warnings', to=settings.AUTH_USER_MODEL, verbose_name='teacher')),
            ],
            options={
                'verbose_name': 'Warning',
                'verbose_name_plural': 'Warnings',
                'ordering': ['-issued_at'],
                'indexes': [models.Index(fields=['student', 'violation_type'], name='detention_s_student_2c5e8a_idx')],
            },
        ),
        migrations.CreateModel(
            name='ViolationRecord',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('violation_type', models.CharField(max_length=100, verbose_name='violation type')),
                ('assigned_date', models.DateField(default=django.utils.timezone.localdate, verbose_name='assigned date')),
                ('detention_date', models.DateField(db_index=True, verbose_name='detention date')),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('attended', 'Attended'), ('absent', 'Absent'), ('reassigned', 'Reassigned')], db_index=True, default='pending', max_length=20, verbose_name='status')),
                ('reschedule_count', models.PositiveSmallIntegerField(default=0, help_text='Number of automatic reassignments after missed sessions', verbose_name='reschedule count')),
                ('slot', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='violations', to='detention.detentionslot', verbose_name='detention slot')),
                ('student', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='violations', to='students.student', verbose_name='student')),
                ('teacher', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='issued_violations', to=settings.AUTH_USER_MODEL, verbose_name='issuing teacher')),
            ],
            options={
                'verbose_name': 'Violation',
                'verbose_name_plural': 'Violations',
                'ordering': ['-detention_date', '-created_at'],
                'indexes': [
                    models.Index(fields=['detention_date', 'status'], name='detention_v_detenti_4e8c2a_idx'),
                    models.Index(fields=['student', 'violation_type'], name='detention_v_student_9b7d1f_idx'),
                ],
            },
        ),
    ]
