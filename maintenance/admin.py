from django.contrib import admin

from .models import Issue


@admin.register(Issue)
class IssueAdmin(admin.ModelAdmin):
    list_display = ('title', 'aircraft', 'severity', 'status', 'reported_by', 'created_at', 'resolved_at')
    list_filter = ('severity', 'status', 'aircraft')
    search_fields = ('title', 'description')
