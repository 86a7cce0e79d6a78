from decimal import Decimal

from django.db import migrations, models
import django.db.models.deletion


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('projects', '0001_initial'),
        ('users', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='TimesheetEntry',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('company_id', models.CharField(db_index=True, help_text="Employee's company at submission", max_length=64)),
                ('date', models.DateField()),
                ('clock_in', models.DateTimeField()),
                ('clock_out', models.DateTimeField()),
                ('break_minutes', models.PositiveIntegerField(default=0)),
                ('normal_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=6)),
                ('evening_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=6)),
                ('night_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=6)),
                ('total_hours', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=6)),
                ('overtime_pay', models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12)),
                ('hourly_rate', models.DecimalField(decimal_places=2, help_text='Rate in force when the entry was last submitted', max_digits=8)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPROVED', 'Approved'), ('REJECTED', 'Rejected')], default='PENDING', max_length=10)),
                ('version', models.PositiveIntegerField(default=1, help_text='Incremented on every write; compare-and-swap token')),
                ('approved_at', models.DateTimeField(blank=True, null=True)),
                ('rejected_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('employee', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='timesheet_entries', to='users.employee')),
                ('project_assignment', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='timesheet_entries', to='projects.projectassignment')),
            ],
            options={
                'verbose_name': 'Timesheet Entry',
                'verbose_name_plural': 'Timesheet Entries',
                'ordering': ['-date', '-clock_in'],
                'indexes': [
                    models.Index(fields=['company_id', 'date'], name='ts_company_date_idx'),
                    models.Index(fields=['employee', 'status', 'date'], name='ts_emp_status_date_idx'),
                ],
            },
        ),
        migrations.AddConstraint(
            model_name='timesheetentry',
            constraint=models.UniqueConstraint(fields=('employee', 'date'), name='unique_timesheet_employee_date'),
        ),
        migrations.CreateModel(
            name='CostAccrual',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('project_id', models.CharField(max_length=64)),
                ('amount', models.DecimalField(decimal_places=2, max_digits=14)),
                ('status', models.CharField(choices=[('PENDING', 'Pending'), ('APPLIED', 'Applied'), ('FAILED', 'Failed')], db_index=True, default='PENDING', max_length=10)),
                ('attempts', models.PositiveIntegerField(default=0)),
                ('last_error', models.CharField(blank=True, max_length=255)),
                ('applied_at', models.DateTimeField(blank=True, null=True)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('entry', models.OneToOneField(on_delete=django.db.models.deletion.PROTECT, related_name='cost_accrual', to='timesheets.timesheetentry')),
            ],
            options={
                'ordering': ['created_at'],
            },
        ),
    ]
