import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name='Notification',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('type', models.CharField(choices=[('ORDER_UPDATE', 'Order update'), ('MESSAGE', 'Message'), ('PAYMENT', 'Payment'), ('REVIEW', 'Review'), ('DISPUTE', 'Dispute'), ('SYSTEM', 'System')], max_length=20)),
                ('content', models.TextField()),
                ('entity_type', models.CharField(blank=True, choices=[('ORDER', 'Order'), ('REVIEW', 'Review'), ('TRANSACTION', 'Transaction'), ('DISPUTE', 'Dispute'), ('MESSAGE', 'Message')], max_length=20, null=True)),
                ('entity_id', models.PositiveBigIntegerField(blank=True, null=True)),
                ('priority', models.CharField(choices=[('LOW', 'Low'), ('NORMAL', 'Normal'), ('HIGH', 'High')], default='NORMAL', max_length=10)),
                ('is_read', models.BooleanField(default=False)),
                ('read_at', models.DateTimeField(blank=True, null=True)),
                ('expires_at', models.DateTimeField(blank=True, null=True)),
                ('metadata', models.JSONField(blank=True, default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('user', models.ForeignKey(on_delete=django.db.models.deletion.CASCADE, related_name='notifications', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at', '-id'],
                'indexes': [models.Index(fields=['user', 'is_read'], name='notification_user_read_idx')],
            },
        ),
    ]
