import django.core.validators
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Lease',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('property_ref', models.CharField(blank=True, max_length=64)),
                ('renter_ref', models.CharField(blank=True, db_index=True, max_length=64)),
                ('owner_ref', models.CharField(blank=True, max_length=64)),
                ('lease_number', models.CharField(max_length=32)),
                ('status', models.CharField(choices=[('DRAFT', 'Draft'), ('ACTIVE', 'Active'), ('SUSPENDED', 'Suspended'), ('ENDED', 'Ended'), ('CANCELED', 'Canceled')], default='ACTIVE', max_length=10)),
                ('start_date', models.DateField()),
                ('end_date', models.DateField(blank=True, help_text='Empty for open-ended leases', null=True)),
                ('billing_frequency', models.CharField(choices=[('MONTHLY', 'Monthly'), ('QUARTERLY', 'Quarterly'), ('SEMIANNUAL', 'Semiannual'), ('ANNUAL', 'Annual')], default='MONTHLY', max_length=12)),
                ('due_day_of_month', models.PositiveSmallIntegerField(default=5, validators=[django.core.validators.MinValueValidator(1), django.core.validators.MaxValueValidator(31)])),
                ('currency', models.CharField(max_length=3)),
                ('rent_amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('service_charge_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('security_deposit_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('penalty_grace_days', models.PositiveIntegerField(default=0)),
                ('penalty_mode', models.CharField(choices=[('FIXED_AMOUNT', 'Fixed amount'), ('PERCENT_OF_RENT', 'Percent of rent'), ('PERCENT_OF_BALANCE', 'Percent of balance')], default='PERCENT_OF_BALANCE', max_length=20)),
                ('penalty_rate', models.DecimalField(decimal_places=4, default=0, help_text='Fraction, 0.10 = 10%', max_digits=7)),
                ('penalty_fixed_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('penalty_cap', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('min_balance_threshold', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('notes', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='leases', to='accounts.account')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Lease',
                'verbose_name_plural': 'Leases',
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['account', 'status'], name='lease_account_status_idx')],
            },
        ),
        migrations.AddConstraint(
            model_name='lease',
            constraint=models.UniqueConstraint(fields=('account', 'lease_number'), name='unique_lease_number_per_account'),
        ),
    ]
