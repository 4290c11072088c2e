from django.contrib import admin

from .models import Booking, RoomInventory, StaffProfile


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = ('transaction_ref', 'room_type_id', 'guest_name', 'check_in', 'check_out', 'status', 'payment_status')
    list_filter = ('status', 'payment_status', 'room_type_id', 'created_by_role')
    search_fields = ('transaction_ref', 'guest_name', 'guest_email')
    # status changes go through the API so inventory side effects run
    readonly_fields = ('status', 'base_total', 'transaction_fee', 'total_amount')


@admin.register(RoomInventory)
class RoomInventoryAdmin(admin.ModelAdmin):
    list_display = ('room_type_id', 'total_rooms', 'available_rooms', 'status', 'is_active')
    list_filter = ('is_active', 'status')


@admin.register(StaffProfile)
class StaffProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'role')
    list_filter = ('role',)
