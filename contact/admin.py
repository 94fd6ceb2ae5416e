"""
Contact Management Django Admin Configuration
"""
from django.contrib import admin
from django.utils import timezone
from .models import ContactMessage, MessageStatus


@admin.register(ContactMessage)
class ContactMessageAdmin(admin.ModelAdmin):
    """Admin interface for contact messages."""

    list_display = [
        'full_name', 'email', 'subject', 'status', 'user',
        'created_at', 'replied_at'
    ]

    list_filter = [
        'status', 'created_at'
    ]

    search_fields = [
        'first_name', 'last_name', 'email', 'subject', 'message'
    ]

    readonly_fields = [
        'id', 'user', 'first_name', 'last_name', 'email', 'subject',
        'message', 'created_at', 'replied_at'
    ]

    fieldsets = (
        ('Contact Information', {
            'fields': ('first_name', 'last_name', 'email', 'user')
        }),
        ('Message', {
            'fields': ('subject', 'message')
        }),
        ('Status', {
            'fields': ('status', 'replied_at')
        }),
        ('Metadata', {
            'fields': ('id', 'created_at'),
            'classes': ('collapse',)
        }),
    )

    actions = ['mark_read', 'mark_replied', 'mark_resolved']

    def save_model(self, request, obj, form, change):
        """Stamp replied_at whenever the status is changed to replied."""
        if 'status' in form.changed_data and obj.status == MessageStatus.REPLIED:
            obj.replied_at = timezone.now()
        super().save_model(request, obj, form, change)

    @admin.action(description='Mark selected messages as read')
    def mark_read(self, request, queryset):
        updated = queryset.update(status=MessageStatus.READ)
        self.message_user(request, f"{updated} message(s) marked as read.")

    @admin.action(description='Mark selected messages as replied')
    def mark_replied(self, request, queryset):
        updated = queryset.update(status=MessageStatus.REPLIED, replied_at=timezone.now())
        self.message_user(request, f"{updated} message(s) marked as replied.")

    @admin.action(description='Mark selected messages as resolved')
    def mark_resolved(self, request, queryset):
        updated = queryset.update(status=MessageStatus.RESOLVED)
        self.message_user(request, f"{updated} message(s) marked as resolved.")

    def has_delete_permission(self, request, obj=None):
        """Only super admins can delete."""
        return request.user.is_superuser
