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
            name='AuditLog',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('action', models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('STATUS_CHANGE', 'Status Change'), ('GENERATE', 'Generate Installments'), ('RECORD_PAYMENT', 'Record Payment'), ('ALLOCATE', 'Allocate Payment'), ('PENALTY', 'Penalty Assessed'), ('PENALTY_OVERRIDE', 'Penalty Override'), ('DEPOSIT_COLLECT', 'Deposit Collected'), ('DEPOSIT_REFUND', 'Deposit Refunded'), ('DEPOSIT_DEDUCT', 'Deposit Deducted'), ('ISSUE_DOCUMENT', 'Issue Document')], db_index=True, max_length=20)),
                ('resource_type', models.CharField(choices=[('Lease', 'Lease'), ('Installment', 'Installment'), ('Payment', 'Payment'), ('SecurityDeposit', 'Security Deposit'), ('RentalDocument', 'Rental Document'), ('Account', 'Account')], db_index=True, max_length=50)),
                ('resource_id', models.IntegerField(blank=True, db_index=True, null=True)),
                ('description', models.TextField(help_text='Human-readable description of the action')),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('timestamp', models.DateTimeField(auto_now_add=True, db_index=True)),
                ('account', models.ForeignKey(help_text='Account this action belongs to', on_delete=django.db.models.deletion.CASCADE, related_name='audit_logs', to='accounts.account')),
                ('user', models.ForeignKey(blank=True, help_text='User who performed the action (empty for scheduled jobs)', null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='audit_logs', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'verbose_name': 'Audit Log',
                'verbose_name_plural': 'Audit Logs',
                'ordering': ['-timestamp', '-id'],
                'indexes': [
                    models.Index(fields=['account', '-timestamp'], name='audit_account_time_idx'),
                    models.Index(fields=['resource_type', 'resource_id'], name='audit_resource_idx'),
                    models.Index(fields=['action', '-timestamp'], name='audit_action_time_idx'),
                ],
            },
        ),
    ]
