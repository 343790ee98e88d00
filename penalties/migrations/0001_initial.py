import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('accounts', '0001_initial'),
        ('installments', '0001_initial'),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='PenaltyAssessment',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('calculated_on', models.DateField(help_text="The 'today' the amount was computed for")),
                ('days_late', models.PositiveIntegerField(default=0)),
                ('mode', models.CharField(choices=[('FIXED_AMOUNT', 'Fixed amount'), ('PERCENT_OF_RENT', 'Percent of rent'), ('PERCENT_OF_BALANCE', 'Percent of balance')], max_length=20)),
                ('rate', models.DecimalField(blank=True, decimal_places=4, max_digits=7, null=True)),
                ('fixed_amount', models.DecimalField(blank=True, decimal_places=2, max_digits=14, null=True)),
                ('amount', models.DecimalField(decimal_places=2, default=0, max_digits=14)),
                ('currency', models.CharField(max_length=3)),
                ('is_manual_override', models.BooleanField(default=False)),
                ('override_reason', models.TextField(blank=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('account', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='penalty_assessments', to='accounts.account')),
                ('created_by', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='+', to=settings.AUTH_USER_MODEL)),
                ('installment', models.OneToOneField(on_delete=django.db.models.deletion.CASCADE, related_name='penalty_assessment', to='installments.installment')),
            ],
            options={
                'verbose_name': 'Penalty Assessment',
                'verbose_name_plural': 'Penalty Assessments',
                'ordering': ['-calculated_on', '-id'],
            },
        ),
    ]
