"""
Contact Management URL Configuration

Mounted under /api/ by core.urls.
"""
from django.urls import path
from .views import (
    ContactMessageListCreateView,
    ContactMessageDetailView,
    ContactMessageStatusView,
    ContactStatsView,
)

app_name = 'contact'

urlpatterns = [
    path('messages', ContactMessageListCreateView.as_view(), name='list'),
    path('messages/stats', ContactStatsView.as_view(), name='stats'),
    path('messages/<str:id>', ContactMessageDetailView.as_view(), name='detail'),
    path('messages/<str:id>/status', ContactMessageStatusView.as_view(), name='status'),
]
