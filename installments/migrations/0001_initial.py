import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('leases', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Installment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('period_year', models.PositiveSmallIntegerField()),
                ('period_month', models.PositiveSmallIntegerField()),
                ('due_date', models.DateField(db_index=True)),
                ('status', models.CharField(choices=[('DUE', 'Due'), ('PARTIAL', 'Partial'), ('OVERDUE', 'Overdue'), ('PAID', 'Paid')], default='DUE', max_length=10)),
                ('currency', models.CharField(max_length=3)),
                ('amount_rent', models.DecimalField(decimal_places=2, max_digits=14)),
                ('amount_service', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('amount_other_fees', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('penalty_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('amount_paid', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('paid_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='installments', to='accounts.account')),
                ('lease', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='installments', to='leases.lease')),
            ],
            options={
                'verbose_name': 'Installment',
                'verbose_name_plural': 'Installments',
                'ordering': ['due_date', 'period_year', 'period_month', 'id'],
                'indexes': [
                    models.Index(fields=['account', 'status'], name='inst_account_status_idx'),
                    models.Index(fields=['lease', 'status'], name='inst_lease_status_idx'),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name='installment',
            constraint=models.UniqueConstraint(fields=('lease', 'period_year', 'period_month'), name='unique_installment_period_per_lease'),
        ),
    ]
