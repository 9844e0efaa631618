from django.contrib import admin

from .models import Reservation


@admin.register(Reservation)
class ReservationAdmin(admin.ModelAdmin):
    list_display = ('aircraft', 'title', 'user', 'start_time', 'end_time', 'completed_at')
    list_filter = ('title', 'aircraft')
    search_fields = ('notes', 'user__username', 'aircraft__tail_number')
    # Written only by the completion service
    readonly_fields = ('start_hobbs', 'end_hobbs', 'completed_at', 'created_at')
