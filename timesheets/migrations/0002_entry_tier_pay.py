from decimal import Decimal

from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ('timesheets', '0001_initial'),
    ]

    operations = [
        migrations.AddField(
            model_name='timesheetentry',
            name='evening_pay',
            field=models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12),
        ),
        migrations.AddField(
            model_name='timesheetentry',
            name='night_pay',
            field=models.DecimalField(decimal_places=2, default=Decimal('0'), max_digits=12),
        ),
        migrations.AlterField(
            model_name='timesheetentry',
            name='overtime_pay',
            field=models.DecimalField(decimal_places=2, default=Decimal('0'), help_text='evening_pay + night_pay', max_digits=12),
        ),
    ]
