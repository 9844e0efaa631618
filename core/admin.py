from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import Aircraft, AircraftEvent, AircraftSubscription, User


@admin.register(User)
class SchedulerUserAdmin(UserAdmin):
    list_display = ('username', 'email', 'privileges', 'is_active', 'date_joined')
    list_filter = ('privileges', 'is_active', 'is_superuser')
    fieldsets = UserAdmin.fieldsets + (
        ('Scheduling', {'fields': ('privileges',)}),
    )


class AircraftSubscriptionInline(admin.TabularInline):
    model = AircraftSubscription
    extra = 0


class AircraftAdmin(admin.ModelAdmin):
    inlines = [AircraftSubscriptionInline]
    list_display = ('tail_number', 'make', 'model', 'year', 'last_hobbs')

    def get_readonly_fields(self, request, obj=None):
        # The meter is advanced by reservation completion after registration
        if obj is not None:
            return ('last_hobbs',)
        return ()


admin.site.register(Aircraft, AircraftAdmin)


@admin.register(AircraftEvent)
class AircraftEventAdmin(admin.ModelAdmin):
    list_display = ['aircraft', 'category', 'event_name', 'user', 'timestamp']
    list_filter = ['category', 'aircraft']
    readonly_fields = ['id', 'timestamp']
