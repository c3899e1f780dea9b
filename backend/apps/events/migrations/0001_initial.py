# Generated manually
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
            name='Event',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('state', models.CharField(choices=[('draft', 'Draft'), ('published', 'Published'), ('live', 'Live'), ('voting_closed', 'Voting closed'), ('results_published', 'Results published'), ('archived', 'Archived'), ('cancelled', 'Cancelled')], db_index=True, default='draft', max_length=32)),
                ('public_id', models.UUIDField(blank=True, null=True, unique=True)),
                ('join_code', models.CharField(blank=True, max_length=16, null=True, unique=True)),
                ('voting_starts_at', models.DateTimeField(blank=True, null=True)),
                ('voting_ends_at', models.DateTimeField(blank=True, null=True)),
                ('votes_per_participant', models.PositiveIntegerField(default=1)),
                ('allow_multiple_votes_per_option', models.BooleanField(default=False)),
                ('tiebreaker', models.CharField(choices=[('earliest_registered', 'Earliest registered option wins'), ('display_order', 'Lowest display order wins'), ('most_unique_voters', 'Most unique voters wins')], default='earliest_registered', max_length=32)),
                ('reveal_policy', models.CharField(choices=[('on_results', 'Reveal when results are published'), ('live_counts', 'Show live counts while voting')], default='on_results', max_length=32)),
                ('config_version', models.PositiveIntegerField(default=1)),
                ('total_votes', models.PositiveIntegerField(default=0, help_text='Number of votes in the ledger')),
                ('total_participants', models.PositiveIntegerField(default=0, help_text='Participants who cast at least one vote')),
                ('total_options', models.PositiveIntegerField(default=0, help_text='Number of active options')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('updated_at', models.DateTimeField(auto_now=True)),
                ('published_at', models.DateTimeField(blank=True, null=True)),
                ('opened_at', models.DateTimeField(blank=True, null=True)),
                ('closed_at', models.DateTimeField(blank=True, null=True)),
                ('results_published_at', models.DateTimeField(blank=True, null=True)),
                ('archived_at', models.DateTimeField(blank=True, null=True)),
                ('cancelled_at', models.DateTimeField(blank=True, null=True)),
                ('host', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='hosted_events', to=settings.AUTH_USER_MODEL)),
            ],
            options={
                'ordering': ['-created_at'],
            },
        ),
        migrations.CreateModel(
            name='Option',
            fields=[
                ('id', models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name='ID')),
                ('title', models.CharField(max_length=200)),
                ('description', models.TextField(blank=True)),
                ('display_order', models.IntegerField(default=0, help_text='Display order for options')),
                ('is_active', models.BooleanField(default=True)),
                ('vote_count', models.PositiveIntegerField(default=0, help_text='Number of votes in the ledger for this option')),
                ('unique_voter_count', models.PositiveIntegerField(default=0, help_text='Distinct participants who voted for this option')),
                ('created_at', models.DateTimeField(auto_now_add=True)),
                ('event', models.ForeignKey(on_delete=django.db.models.deletion.PROTECT, related_name='options', to='events.event')),
            ],
            options={
                'ordering': ['display_order', 'id'],
            },
        ),
        migrations.AddConstraint(
            model_name='event',
            constraint=models.CheckConstraint(condition=models.Q(('votes_per_participant__gte', 1)), name='event_votes_per_participant_positive'),
        ),
        migrations.AddIndex(
            model_name='event',
            index=models.Index(fields=['state', 'voting_ends_at'], name='events_state_ends_idx'),
        ),
        migrations.AddIndex(
            model_name='event',
            index=models.Index(fields=['host', 'created_at'], name='events_host_created_idx'),
        ),
        migrations.AddIndex(
            model_name='option',
            index=models.Index(fields=['event', 'display_order'], name='events_option_order_idx'),
        ),
    ]
