"""
URL configuration for the voting engine.
"""

from django.conf import settings
from django.contrib import admin
from django.urls import include, path
from drf_spectacular.views import (
    SpectacularAPIView,
    SpectacularRedocView,
    SpectacularSwaggerView,
)
from rest_framework.decorators import api_view, permission_classes, renderer_classes
from rest_framework.permissions import AllowAny
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response


@api_view(["GET"])
@permission_classes([AllowAny])
@renderer_classes([JSONRenderer])
def api_root(request):
    """API root endpoint that lists available endpoints."""
    data = {
        "message": "Event Voting API",
        "version": "1.0.0",
        "documentation": {
            "swagger_ui": "/api/docs/",
            "redoc": "/api/redoc/",
            "schema": "/api/schema/",
        },
        "endpoints": {
            "events": "/api/v1/events/",
            "leaderboard": "/api/v1/events/{id}/leaderboard/",
            "join": "/api/v1/events/{id}/join/",
            "cast_vote": "/api/v1/votes/cast/",
        },
    }

    return Response(data)


urlpatterns = [
    path("admin/", admin.site.urls),
    # API Root - accessible without authentication
    path("api/v1/", api_root, name="api-root"),
    path("api/v1/", include("apps.events.urls")),
    path("api/v1/", include("apps.votes.urls")),
    # API Documentation
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),
    path("api/redoc/", SpectacularRedocView.as_view(url_name="schema"), name="redoc"),
]

if settings.DEBUG and "debug_toolbar" in settings.INSTALLED_APPS:
    urlpatterns += [path("__debug__/", include("debug_toolbar.urls"))]
