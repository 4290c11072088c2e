from rest_framework.routers import DefaultRouter
from reservations.views import BookingViewSet, PaymentViewSet, RoomInventoryViewSet, RoomTypeViewSet

router = DefaultRouter()
router.register(r'rooms', RoomTypeViewSet, basename='room-type')
router.register(r'bookings', BookingViewSet)
router.register(r'room-inventory', RoomInventoryViewSet, basename='room-inventory')
router.register(r'payments', PaymentViewSet, basename='payment')

urlpatterns = router.urls
