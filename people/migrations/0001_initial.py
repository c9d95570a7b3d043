from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name='Person',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('category', models.CharField(choices=[('Staff', 'Staff'), ('Student', 'Student'), ('Parent/Guardian', 'Parent/Guardian')], max_length=20)),
                ('first_name', models.CharField(max_length=50)),
                ('last_name', models.CharField(max_length=50)),
                ('image', models.TextField(help_text='Image URL or data URI')),
                ('role', models.CharField(blank=True, help_text='Staff and Parent/Guardian only', max_length=50, null=True)),
                ('class_name', models.CharField(blank=True, db_column='class', help_text='Students only (e.g., Grade 5)', max_length=50, null=True)),
                ('guardian_ids', models.JSONField(blank=True, default=list, help_text='Ordered ids of guardian profiles; students only')),
                ('bio', models.TextField()),
                ('external_roster_id', models.CharField(max_length=20)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
            ],
            options={
                'db_table': 'people',
                'ordering': ['last_name', 'first_name'],
                'indexes': [
                    models.Index(fields=['category'], name='people_category_idx'),
                    models.Index(fields=['last_name', 'first_name'], name='people_name_idx'),
                ],
            },
        ),
    ]
