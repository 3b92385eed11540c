import uuid

import apps.core.validators
import django.core.validators
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Student',
            fields=[
                ('id', models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ('created_at', models.DateTimeField(auto_now_add=True, db_index=True, verbose_name='created at')),
                ('updated_at', models.DateTimeField(auto_now=True, db_index=True, verbose_name='updated at')),
                ('name', models.CharField(db_index=True, max_length=200, verbose_name='name')),
                ('email', models.EmailField(max_length=254, verbose_name='school email')),
                ('parent_email', models.EmailField(blank=True, max_length=254, verbose_name='parent email')),
                ('barcode', models.CharField(help_text='Six digit number printed on the student ID card', max_length=6, unique=True, validators=[apps.core.validators.barcode_validator], verbose_name='barcode')),
                ('grade', models.PositiveSmallIntegerField(choices=[(9, '9th grade'), (10, '10th grade'), (11, '11th grade'), (12, '12th grade')], validators=[django.core.validators.MinValueValidator(9), django.core.validators.MaxValueValidator(12)], verbose_name='grade')),
                ('parent_access_code', models.CharField(blank=True, max_length=8, unique=True, validators=[apps.core.validators.access_code_validator], verbose_name='parent access code')),
                ('parent_verified', models.BooleanField(default=False, verbose_name='parent verified')),
                ('parent_verified_at', models.DateTimeField(blank=True, null=True, verbose_name='parent verified at')),
            ],
            options={
                'verbose_name': 'Student',
                'verbose_name_plural': 'Students',
                'ordering': ['name'],
            },
        ),
    ]
