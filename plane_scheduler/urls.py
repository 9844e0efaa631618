"""
URL configuration for plane_scheduler project.

All scheduling functionality is exposed as a JSON API under /api/.
"""
from django.contrib import admin
from django.urls import path, include

from rest_framework import routers

from core import views as core_views
from maintenance import views as maintenance_views
from reservations import views as reservation_views

router = routers.DefaultRouter()
router.register(r'aircraft', core_views.AircraftViewSet)
router.register(r'aircraft-events', core_views.AircraftEventViewSet)
router.register(r'reservations', reservation_views.ReservationViewSet)
router.register(r'issues', maintenance_views.IssueViewSet)
router.register(r'users', core_views.UserViewSet)


urlpatterns = [
    path('healthz/', core_views.healthz, name='healthz'),
    path('api/subscriptions/', core_views.SubscriptionListView.as_view(), name='subscription-list'),
    path('api/subscriptions/<uuid:aircraft_id>/', core_views.SubscriptionDetailView.as_view(), name='subscription-detail'),
    path('api/', include(router.urls)),
    path('admin/', admin.site.urls),
    path('api-auth/', include('rest_framework.urls')),
]
