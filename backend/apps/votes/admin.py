"""
Admin configuration for Votes app. The ledger is read-only here.
"""

from django.contrib import admin

from .models import Vote, VoteAttempt, VoteRequest


class ReadOnlyAdmin(admin.ModelAdmin):
    def has_add_permission(self, request):
        return False

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(Vote)
class VoteAdmin(ReadOnlyAdmin):
    list_display = ["id", "event", "participant", "option", "sequence_number", "origin", "cast_at"]
    list_filter = ["origin", "cast_at"]
    search_fields = ["event__title", "option__title"]


@admin.register(VoteRequest)
class VoteRequestAdmin(ReadOnlyAdmin):
    list_display = ["client_request_token", "participant", "vote", "created_at"]
    search_fields = ["client_request_token"]


@admin.register(VoteAttempt)
class VoteAttemptAdmin(ReadOnlyAdmin):
    list_display = ["event", "participant", "option", "success", "replayed", "error_code", "created_at"]
    list_filter = ["success", "replayed", "error_code", "created_at"]
