import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('leases', '0001_initial'),
        ('installments', '0001_initial'),
        ('payments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='SecurityDeposit',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('currency', models.CharField(max_length=3)),
                ('target_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('collected_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('held_amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('collected_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='security_deposits', to='accounts.account')),
                ('lease', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='security_deposit', to='leases.lease')),
            ],
            options={
                'verbose_name': 'Security Deposit',
                'verbose_name_plural': 'Security Deposits',
            },
        ),
        migrations.CreateModel(
            name='DepositMovement',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('COLLECT', 'Collect'), ('REFUND', 'Refund'), ('DEDUCT', 'Deduct')], max_length=10)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('note', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='deposit_movements', to='accounts.account')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('deposit', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='movements', to='deposits.securitydeposit')),
                ('installment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='deposit_movements', to='installments.installment')),
                ('payment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='deposit_movements', to='payments.payment')),
            ],
            options={
                'verbose_name': 'Deposit Movement',
                'verbose_name_plural': 'Deposit Movements',
                'ordering': ['created_at', 'id'],
            },
        ),
    ]
