from django.db import migrations, models


class Migration(migrations.Migration):

    dependencies = [
        ("inventory", "0001_initial"),
    ]

    operations = [
        migrations.AlterField(
            model_name="inventorytransaction",
            name="transaction_type",
            field=models.CharField(
                choices=[
                    ("PURCHASE", "Purchase Receipt"),
                    ("SALE", "Sale Deduction"),
                    ("WASTE", "Waste"),
                    ("TRANSFER_OUT", "Transfer Out"),
                    ("TRANSFER_IN", "Transfer In"),
                    ("ADJUSTMENT", "Adjustment"),
                    ("COUNT", "Stock Count"),
                    ("PRODUCTION", "Production"),
                ],
                db_index=True,
                max_length=20,
            ),
        ),
    ]
