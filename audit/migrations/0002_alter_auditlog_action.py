from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('audit', '0001_initial'),
    ]

    operations = [
        migrations.AlterField(
            model_name='auditlog',
            name='action',
            field=models.CharField(choices=[('CREATE', 'Create'), ('UPDATE', 'Update'), ('STATUS_CHANGE', 'Status Change'), ('GENERATE', 'Generate Installments'), ('RECORD_PAYMENT', 'Record Payment'), ('ALLOCATE', 'Allocate Payment'), ('PENALTY', 'Penalty Assessed'), ('PENALTY_OVERRIDE', 'Penalty Override'), ('DEPOSIT_COLLECT', 'Deposit Collected'), ('DEPOSIT_REFUND', 'Deposit Refunded'), ('DEPOSIT_DEDUCT', 'Deposit Deducted'), ('ISSUE_DOCUMENT', 'Issue Document'), ('CO_RENTER_ADD', 'Co-renter Added'), ('CO_RENTER_REMOVE', 'Co-renter Removed')], db_index=True, max_length=20),
        ),
    ]
