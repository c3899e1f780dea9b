# Generated manually
import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
        ('events', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Participant',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('phone_number', models.CharField(blank=True, max_length=20, null=True)),
                ('anonymous_token', models.CharField(blank=True, max_length=128, null=True)),
                ('registration_method', models.CharField(choices=[('account', 'Account'), ('phone', 'Phone number'), ('anonymous', 'Anonymous token'), ('invite', 'Invitation')], max_length=16)),
                ('access_token', models.CharField(help_text='Secret presented when voting as this participant', max_length=64, unique=True)),
                ('votes_used', models.PositiveIntegerField(default=0)),
                ('max_votes', models.PositiveIntegerField()),
                ('config_version', models.PositiveIntegerField(default=1, help_text='Event configuration version at join time')),
                ('last_vote_at', models.DateTimeField(blank=True, null=True)),
                ('joined_at', models.DateTimeField(auto_now_add=True)),
                ('account', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.PROTECT, related_name='event_participations', to=settings.AUTH_USER_MODEL)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='participants', to='events.event')),
            ],
            options={
                'ordering': ['joined_at', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.CheckConstraint(condition=models.Q(models.Q(('account__isnull', False), ('anonymous_token__isnull', True), ('phone_number__isnull', True)), models.Q(('account__isnull', True), ('anonymous_token__isnull', True), ('phone_number__isnull', False)), models.Q(('account__isnull', True), ('anonymous_token__isnull', False), ('phone_number__isnull', True)), _connector='OR'), name='participant_exactly_one_identity'),
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.CheckConstraint(condition=models.Q(('votes_used__lte', models.F('max_votes'))), name='participant_votes_within_allowance'),
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.UniqueConstraint(condition=models.Q(('account__isnull', False)), fields=('event', 'account'), name='unique_event_account'),
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.UniqueConstraint(condition=models.Q(('phone_number__isnull', False)), fields=('event', 'phone_number'), name='unique_event_phone_number'),
        ),
        migrations.AddConstraint(
            model_name='participant',
            constraint=models.UniqueConstraint(condition=models.Q(('anonymous_token__isnull', False)), fields=('event', 'anonymous_token'), name='unique_event_anonymous_token'),
        ),
    ]
