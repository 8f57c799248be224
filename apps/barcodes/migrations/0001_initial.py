from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
        ('trades', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='BarcodeInstance',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('barcode', models.CharField(max_length=3, unique=True)),
                ('sheet', models.CharField(blank=True, max_length=50, null=True)),
                ('control_bar', models.PositiveSmallIntegerField(choices=[(0, 'Free token'), (1, 'Original'), (2, 'Duplicate'), (3, 'Reserved for trade')], default=2)),
                ('beer_cap', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='barcodes', to='catalog.beercap')),
                ('reserved_trade', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='reserved_instances', to='trades.trade')),
            ],
            options={
                'db_table': 'beer_caps_barcodes',
                'ordering': ['id'],
                'indexes': [
                    models.Index(fields=['beer_cap', 'control_bar'], name='barcodes_cap_control_idx'),
                    models.Index(fields=['reserved_trade', 'control_bar'], name='barcodes_trade_control_idx'),
                    models.Index(fields=['control_bar'], name='barcodes_control_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            (models.Q(control_bar=3) & models.Q(reserved_trade__isnull=False))
                            | (~models.Q(control_bar=3) & models.Q(reserved_trade__isnull=True))
                        ),
                        name='barcodes_reserved_iff_trade',
                    ),
                ],
            },
        ),
    ]
