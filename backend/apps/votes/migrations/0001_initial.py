# Generated manually
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ('events', '0001_initial'),
        ('participants', '0001_initial'),
    ]

    operations = [
        migrations.CreateModel(
            name='Vote',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('sequence_number', models.PositiveIntegerField(help_text="This participant's Nth vote, in commit order")),
                ('option_slot', models.PositiveIntegerField(default=0)),
                ('origin', models.CharField(default='api', help_text='Channel the vote arrived through (web, sms, api)', max_length=32)),
                ('ip_address', models.GenericIPAddressField(blank=True, help_text='IP address of voter', null=True)),
                ('user_agent', models.TextField(blank=True, help_text='User agent string')),
                ('client_info', models.JSONField(blank=True, default=dict)),
                ('cast_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='votes', to='events.event')),
                ('option', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='votes', to='events.option')),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='votes', to='participants.participant')),
            ],
            options={
                'ordering': ['cast_at', 'id'],
            },
        ),
        migrations.CreateModel(
            name='VoteRequest',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('client_request_token', models.CharField(max_length=128)),
                ('response', models.JSONField(default=dict)),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('participant', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='vote_requests', to='participants.participant')),
                ('vote', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='requests', to='votes.vote')),
            ],
        ),
        migrations.CreateModel(
            name='VoteAttempt',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('client_request_token', models.CharField(blank=True, max_length=128)),
                ('origin', models.CharField(blank=True, max_length=32)),
                ('ip_address', models.GenericIPAddressField(blank=True, null=True)),
                ('user_agent', models.TextField(blank=True)),
                ('success', models.BooleanField(default=False, help_text='Whether the vote attempt was successful')),
                ('replayed', models.BooleanField(default=False, help_text='Whether the attempt replayed an earlier result')),
                ('error_code', models.CharField(blank=True, max_length=64)),
                ('error_message', models.TextField(blank=True, help_text='Error message if attempt failed')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vote_attempts', to='events.event')),
                ('option', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vote_attempts', to='events.option')),
                ('participant', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='vote_attempts', to='participants.participant')),
                ('vote', models.ForeignKey(blank=True, null=True, on_delete=django.db.models.deletion.SET_NULL, related_name='attempts', to='votes.vote')),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.AddConstraint(
            model_name='vote',
            constraint=models.UniqueConstraint(fields=('participant', 'sequence_number'), name='unique_participant_vote_sequence'),
        ),
        migrations.AddConstraint(
            model_name='vote',
            constraint=models.UniqueConstraint(fields=('participant', 'option', 'option_slot'), name='unique_participant_option_slot'),
        ),
        migrations.AddIndex(
            model_name='vote',
            index=models.Index(fields=['event', 'cast_at'], name='votes_event_cast_idx'),
        ),
        migrations.AddIndex(
            model_name='vote',
            index=models.Index(fields=['option', 'participant'], name='votes_option_participant_idx'),
        ),
        migrations.AddConstraint(
            model_name='voterequest',
            constraint=models.UniqueConstraint(fields=('participant', 'client_request_token'), name='unique_participant_request_token'),
        ),
        migrations.AddIndex(
            model_name='voteattempt',
            index=models.Index(fields=['event', 'created_at'], name='votes_attempt_event_idx'),
        ),
        migrations.AddIndex(
            model_name='voteattempt',
            index=models.Index(fields=['success', 'created_at'], name='votes_attempt_success_idx'),
        ),
    ]
