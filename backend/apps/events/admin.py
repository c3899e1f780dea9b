"""
Admin configuration for Events app.
"""

from django.contrib import admin

from . import state_machine
from .models import Event, Option


class OptionInline(admin.TabularInline):
    """Options are only editable while the event accepts option edits."""

    model = Option
    extra = 0
    fields = ["title", "display_order", "is_active", "vote_count", "unique_voter_count"]
    readonly_fields = ["vote_count", "unique_voter_count"]

    def _editable(self, event):
        return event is None or state_machine.accepts_option_edits(event.state)

    def get_readonly_fields(self, request, obj=None):
        if self._editable(obj):
            return self.readonly_fields
        return self.fields

    def has_add_permission(self, request, obj=None):
        return self._editable(obj) and super().has_add_permission(request, obj)

    def has_delete_permission(self, request, obj=None):
        return self._editable(obj) and super().has_delete_permission(request, obj)


@admin.register(Event)
class EventAdmin(admin.ModelAdmin):
    """Admin interface for Event model. State changes go through the lifecycle services."""

    list_display = ["title", "host", "state", "voting_starts_at", "voting_ends_at", "total_votes", "total_participants"]
    list_filter = ["state", "reveal_policy", "created_at"]
    search_fields = ["title", "description", "join_code"]
    readonly_fields = [
        "state",
        "public_id",
        "join_code",
        "config_version",
        "total_votes",
        "total_participants",
        "total_options",
        "created_at",
        "updated_at",
        "published_at",
        "opened_at",
        "closed_at",
        "results_published_at",
        "archived_at",
        "cancelled_at",
    ]
    inlines = [OptionInline]
    fieldsets = (
        ("Basic Information", {"fields": ("title", "description", "host", "state", "public_id", "join_code")}),
        ("Voting Window", {"fields": ("voting_starts_at", "voting_ends_at")}),
        (
            "Configuration",
            {
                "fields": (
                    "votes_per_participant",
                    "allow_multiple_votes_per_option",
                    "tiebreaker",
                    "reveal_policy",
                    "config_version",
                )
            },
        ),
        ("Cached Totals", {"fields": ("total_votes", "total_participants", "total_options")}),
        (
            "Timestamps",
            {
                "fields": (
                    "created_at",
                    "updated_at",
                    "published_at",
                    "opened_at",
                    "closed_at",
                    "results_published_at",
                    "archived_at",
                    "cancelled_at",
                )
            },
        ),
    )
