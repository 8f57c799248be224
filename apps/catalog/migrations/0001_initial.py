from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
    ]

    operations = [
        migrations.CreateModel(
            name='Country',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name_full', models.CharField(max_length=100, unique=True)),
                ('name_abb', models.CharField(blank=True, max_length=10)),
            ],
            options={
                'verbose_name_plural': 'countries',
                'db_table': 'caps_country',
                'ordering': ['name_full'],
            },
        ),
        migrations.CreateModel(
            name='BeerCap',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('beer_name', models.CharField(max_length=200)),
                ('cap_no', models.PositiveIntegerField(default=1)),
                ('sheet', models.CharField(blank=True, max_length=50, null=True)),
                ('entry_date', models.DateField(blank=True, null=True)),
                ('issued_year', models.PositiveSmallIntegerField(blank=True, null=True)),
                ('country', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='caps', to='catalog.country')),
            ],
            options={
                'db_table': 'beer_caps',
                'ordering': ['beer_name', 'cap_no'],
                'indexes': [models.Index(fields=['country', 'beer_name'], name='beer_caps_country_name_idx')],
            },
        ),
    ]
