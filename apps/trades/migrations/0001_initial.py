from django.db import migrations, models
import django.db.models.deletion
import django.utils.timezone


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('catalog', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Trader',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('name', models.CharField(max_length=200)),
                ('details', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('country', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='traders', to='catalog.country')),
            ],
            options={
                'db_table': 'traders',
                'ordering': ['-id'],
                'indexes': [
                    models.Index(fields=['name'], name='traders_name_idx'),
                    models.Index(fields=['country', 'name'], name='traders_country_name_idx'),
                ],
            },
        ),
        migrations.CreateModel(
            name='Trade',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('trade_type', models.CharField(choices=[('blind', 'Blind'), ('scan_based', 'Scan based')], default='scan_based', max_length=20)),
                ('status', models.CharField(choices=[('pending', 'Pending'), ('canceled', 'Canceled'), ('completed', 'Completed')], default='pending', max_length=20)),
                ('date_started', models.DateTimeField(default=django.utils.timezone.now)),
                ('date_canceled', models.DateTimeField(blank=True, null=True)),
                ('date_completed', models.DateTimeField(blank=True, null=True)),
                ('notes', models.TextField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('trader', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='trades', to='trades.trader')),
            ],
            options={
                'db_table': 'trades',
                'ordering': ['-date_started'],
                'indexes': [
                    models.Index(fields=['status', 'date_started'], name='trades_status_started_idx'),
                    models.Index(fields=['trader', 'status'], name='trades_trader_status_idx'),
                ],
                'constraints': [
                    models.CheckConstraint(
                        condition=(
                            (models.Q(status='pending') & models.Q(date_canceled__isnull=True) & models.Q(date_completed__isnull=True))
                            | (models.Q(status='canceled') & models.Q(date_canceled__isnull=False) & models.Q(date_completed__isnull=True))
                            | (models.Q(status='completed') & models.Q(date_completed__isnull=False) & models.Q(date_canceled__isnull=True))
                        ),
                        name='trades_status_matches_dates',
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name='TradeCap',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('barcode', models.CharField(max_length=3)),
                ('sheet', models.CharField(blank=True, max_length=50, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('beer_cap', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='trade_records', to='catalog.beercap')),
                ('trade', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='traded_caps', to='trades.trade')),
            ],
            options={
                'db_table': 'trade_caps',
                'ordering': ['id'],
                'indexes': [models.Index(fields=['trade', 'beer_cap'], name='trade_caps_trade_cap_idx')],
            },
        ),
    ]
