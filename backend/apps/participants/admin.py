"""
Admin configuration for Participants app.
"""

from django.contrib import admin

from .models import Participant


@admin.register(Participant)
class ParticipantAdmin(admin.ModelAdmin):
    list_display = ["id", "event", "registration_method", "account", "phone_number", "votes_used", "max_votes", "joined_at"]
    list_filter = ["registration_method", "joined_at"]
    search_fields = ["phone_number", "anonymous_token", "account__username", "event__title"]
    readonly_fields = [
        "event",
        "account",
        "phone_number",
        "anonymous_token",
        "registration_method",
        "votes_used",
        "max_votes",
        "config_version",
        "last_vote_at",
        "joined_at",
    ]
    exclude = ["access_token"]
