import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('leases', '0001_initial'),
        ('payments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='DocumentCounter',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('doc_type', models.CharField(choices=[('LEASE_CONTRACT', 'Lease contract'), ('LEASE_NUMBER', 'Lease number'), ('RENT_RECEIPT', 'Rent receipt'), ('RENT_STATEMENT', 'Rent statement')], max_length=20)),
                ('period_key', models.CharField(help_text='YYYY for annual sequences, YYYY-MM for monthly ones', max_length=7)),
                ('last_number', models.PositiveIntegerField(default=0)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='document_counters', to='accounts.account')),
            ],
            options={
                'verbose_name': 'Document Counter',
                'verbose_name_plural': 'Document Counters',
            },
        ),
        migrations.AddConstraint(
            model_name='documentcounter',
            constraint=models.UniqueConstraint(fields=('account', 'doc_type', 'period_key'), name='unique_document_counter_key'),
        ),
        migrations.CreateModel(
            name='RentalDocument',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('doc_type', models.CharField(choices=[('LEASE_CONTRACT', 'Lease contract'), ('LEASE_NUMBER', 'Lease number'), ('RENT_RECEIPT', 'Rent receipt'), ('RENT_STATEMENT', 'Rent statement')], max_length=20)),
                ('source_key', models.CharField(help_text='Lease id or payment id the document was issued for', max_length=64)),
                ('document_number', models.CharField(db_index=True, max_length=32)),
                ('revision', models.PositiveIntegerField(default=1)),
                ('status', models.CharField(choices=[('ISSUED', 'Issued'), ('RENDERED', 'Rendered'), ('FAILED', 'Failed')], default='ISSUED', max_length=10)),
                ('file_ref', models.CharField(blank=True, max_length=500)),
                ('content_hash', models.CharField(blank=True, max_length=64)),
                ('error_message', models.TextField(blank=True)),
                ('issued_at', models.DateTimeField(auto_now_add=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='documents', to='accounts.account')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('lease', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='documents', to='leases.lease')),
                ('payment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='documents', to='payments.payment')),
            ],
            options={
                'verbose_name': 'Rental Document',
                'verbose_name_plural': 'Rental Documents',
                'ordering': ['-issued_at', '-id'],
                'indexes': [models.Index(fields=['account', 'doc_type', 'source_key'], name='document_source_idx')],
            },
        ),
    ]
