import logging

from django.http import JsonResponse
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import AllowAny
from rest_framework.response import Response

from . import availability, catalog, inventory, lifecycle
from . import cache as cache_keys
from .cache import CacheService
from .exceptions import AuthorizationError, BookingNotFound
from .models import Booking, RoomInventory
from .payments import FlutterwaveClient, is_successful, valid_webhook_signature
from .permissions import STAFF_ROLES, Role, require_roles, staff_role
from .serializers import (
    AvailabilityQuerySerializer,
    AvailabilitySerializer,
    BookingCreatedSerializer,
    BookingRequestSerializer,
    BookingSerializer,
    BookingStatusSerializer,
    DashboardRowSerializer,
    PaymentInitiateSerializer,
    RoomInventorySerializer,
    RoomInventoryUpdateSerializer,
    RoomInventoryWriteSerializer,
    RoomTypeSerializer,
)

logger = logging.getLogger(__name__)

IsStaff = require_roles(*STAFF_ROLES)
IsFrontDesk = require_roles(Role.SUPERADMIN, Role.RECEPTIONIST)
IsSuperAdmin = require_roles(Role.SUPERADMIN)


def welcome(request):
    return JsonResponse({"message": "Welcome to the Hotel Back-Office API"})


def health_check(request):
    return JsonResponse({"status": "ok"})


class CachedViewMixin:
    cache_service = None

    def get_cache_service(self):
        if self.cache_service is None:
            self.cache_service = CacheService()
        return self.cache_service

    def invalidate_booking_reads(self):
        # room counts on the inventory screens derive from bookings too
        self.get_cache_service().invalidate(cache_keys.BOOKINGS, cache_keys.INVENTORY)


class RoomTypeViewSet(viewsets.ViewSet):
    """Static room-type catalogue."""
    permission_classes = [AllowAny]

    def list(self, request):
        return Response(RoomTypeSerializer(catalog.all_room_types(), many=True).data)

    def retrieve(self, request, pk=None):
        return Response(RoomTypeSerializer(catalog.get(pk)).data)


class BookingViewSet(CachedViewMixin, viewsets.ModelViewSet):
    queryset = Booking.objects.all()
    serializer_class = BookingSerializer
    http_method_names = ['get', 'post', 'put', 'patch', 'delete', 'head', 'options']

    def get_permissions(self):
        if self.action == 'public':
            return [AllowAny()]
        if self.action in ('create', 'update', 'partial_update', 'destroy'):
            return [IsFrontDesk()]
        return [IsStaff()]

    def list(self, request):
        """All bookings, optionally filtered by ``status`` and ``room_type_id``."""
        status_filter = request.query_params.get('status', '')
        room_type_filter = request.query_params.get('room_type_id', '')

        def load():
            bookings = self.get_queryset()
            if status_filter:
                bookings = bookings.filter(status=status_filter)
            if room_type_filter:
                bookings = bookings.filter(room_type_id=room_type_filter)
            return [dict(item) for item in self.get_serializer(bookings, many=True).data]

        key = f'{cache_keys.BOOKING_LIST}:{status_filter}:{room_type_filter}'
        data = self.get_cache_service().get_or_set(key, load)
        return Response({'success': True, 'data': data})

    def retrieve(self, request, pk=None):
        booking = lifecycle.get_booking(pk)
        return Response(self.get_serializer(booking).data)

    @action(detail=False, methods=['get'], url_path=r'by-reference/(?P<ref>[^/]+)')
    def by_reference(self, request, ref=None):
        """Look a booking up by its transaction reference"""
        booking = Booking.objects.filter(transaction_ref=ref).first()
        if booking is None:
            raise BookingNotFound(f"No booking with reference '{ref}'")
        return Response(self.get_serializer(booking).data)

    def _create(self, request, actor_role):
        serializer = BookingRequestSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        result = lifecycle.create_booking(
            room_type_id=data['room_type_id'],
            guest=serializer.guest(),
            check_in=data['check_in'],
            check_out=data['check_out'],
            actor_role=actor_role,
            guests=data['guests'],
            transaction_ref=data.get('transaction_ref') or None,
            payment_status=None if actor_role == Booking.CreatedBy.CLIENT else data.get('payment_status'),
        )
        if result.created:
            self.invalidate_booking_reads()

        body = BookingCreatedSerializer({
            'success': True,
            'message': 'Booking created successfully' if result.created else 'Booking already exists',
            'booking': result.booking,
            'base_total': result.quote.base_total,
            'transaction_fee': result.quote.transaction_fee,
            'total_amount': result.quote.total_amount,
        }).data
        return Response(body, status=status.HTTP_201_CREATED if result.created else status.HTTP_200_OK)

    def create(self, request):
        """Staff booking: confirmed immediately, availability checked."""
        return self._create(request, staff_role(request.user))

    @action(detail=False, methods=['post'])
    def public(self, request):
        """Customer booking: pending until the payment is verified."""
        return self._create(request, Booking.CreatedBy.CLIENT)

    def update(self, request, pk=None, **kwargs):
        """Move a booking to a new status"""
        serializer = BookingStatusSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        new_status = serializer.validated_data['status']

        booking = lifecycle.transition(pk, new_status, staff_role(request.user))
        self.invalidate_booking_reads()
        return Response({
            'success': True,
            'message': f'Booking status updated to {new_status}',
            'booking': self.get_serializer(booking).data,
        })

    def partial_update(self, request, pk=None, **kwargs):
        return self.update(request, pk, **kwargs)

    def destroy(self, request, pk=None):
        lifecycle.delete_booking(pk, staff_role(request.user))
        self.invalidate_booking_reads()
        return Response({'success': True, 'message': 'Booking deleted successfully'})


class RoomInventoryViewSet(CachedViewMixin, viewsets.ViewSet):

    def get_permissions(self):
        if self.action in ('available', 'check_availability'):
            return [AllowAny()]
        if self.action in ('create', 'update', 'partial_update', 'destroy'):
            return [IsSuperAdmin()]
        return [IsStaff()]

    def list(self, request):
        records = RoomInventory.objects.filter(is_active=True)
        return Response({'success': True, 'data': RoomInventorySerializer(records, many=True).data})

    def retrieve(self, request, pk=None):
        return Response({'success': True, 'data': RoomInventorySerializer(inventory.get(pk)).data})

    def create(self, request):
        serializer = RoomInventoryWriteSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        record = inventory.create(**serializer.validated_data)
        self.get_cache_service().invalidate(cache_keys.INVENTORY)
        return Response(
            {'success': True, 'data': RoomInventorySerializer(record).data,
             'message': 'Room inventory created successfully'},
            status=status.HTTP_201_CREATED,
        )

    def update(self, request, pk=None, partial=False):
        serializer = RoomInventoryUpdateSerializer(data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data
        record = inventory.update(
            pk,
            total_rooms=data.get('total_rooms'),
            available_rooms=data.get('available_rooms'),
            status=data.get('status'),
            room_type_id=data.get('room_type_id'),
        )
        self.get_cache_service().invalidate(cache_keys.INVENTORY)
        return Response({'success': True, 'data': RoomInventorySerializer(record).data,
                         'message': 'Room inventory updated successfully'})

    def partial_update(self, request, pk=None):
        return self.update(request, pk, partial=True)

    def destroy(self, request, pk=None):
        record = inventory.deactivate(pk)
        self.get_cache_service().invalidate(cache_keys.INVENTORY)
        return Response({'success': True, 'data': RoomInventorySerializer(record).data,
                         'message': 'Room inventory deleted successfully'})

    @action(detail=False, methods=['get'])
    def available(self, request):
        """Bookable room types for the public site"""
        data = self.get_cache_service().get_or_set(cache_keys.PUBLIC_ROOMS, self._public_rows)
        return Response({'success': True, 'data': data})

    def _public_rows(self):
        rows = inventory.public_listing()
        for row in rows:
            row['price_per_night'] = str(row['price_per_night'])
        return rows

    @action(detail=False, methods=['get'])
    def dashboard(self, request):
        """Inventory with tonight's occupancy derived from bookings"""
        def load():
            rows = DashboardRowSerializer(inventory.dashboard(), many=True).data
            return [dict(row) for row in rows]
        data = self.get_cache_service().get_or_set(cache_keys.INVENTORY_DASHBOARD, load)
        return Response({'success': True, 'data': data})

    @action(detail=False, methods=['get'], url_path='check-availability')
    def check_availability(self, request):
        query = AvailabilityQuerySerializer(data=request.query_params)
        query.is_valid(raise_exception=True)
        params = query.validated_data
        # always computed live; the cached counter is never consulted here
        result = availability.check(params['room_type_id'], params['check_in'], params['check_out'])
        return Response(AvailabilitySerializer({
            'success': True,
            'available': result.available,
            'free_rooms': result.free_rooms,
            'total_rooms': result.total_rooms,
            'booked_rooms': result.booked_rooms,
        }).data)


class PaymentViewSet(CachedViewMixin, viewsets.ViewSet):
    permission_classes = [AllowAny]
    payment_client_class = FlutterwaveClient

    def get_payment_client(self):
        return self.payment_client_class()

    def _settle(self, booking, payload):
        if not is_successful(payload, booking):
            return None
        updated, changed = lifecycle.apply_payment_success(booking.transaction_ref)
        if changed:
            self.invalidate_booking_reads()
        return updated, changed

    @action(detail=False, methods=['post'])
    def initiate(self, request):
        serializer = PaymentInitiateSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        ref = serializer.validated_data['transaction_ref']
        booking = Booking.objects.filter(transaction_ref=ref).first()
        if booking is None:
            raise BookingNotFound(f"No booking with reference '{ref}'")
        payload = self.get_payment_client().initiate(booking, serializer.validated_data['redirect_url'])
        return Response({'success': True, 'data': payload.get('data', {})})

    @action(detail=False, methods=['get'], url_path=r'verify/(?P<transaction_ref>[^/]+)')
    def verify(self, request, transaction_ref=None):
        booking = Booking.objects.filter(transaction_ref=transaction_ref).first()
        if booking is None:
            raise BookingNotFound(f"No booking with reference '{transaction_ref}'")

        settled = self._settle(booking, self.get_payment_client().verify(transaction_ref))
        if settled is None:
            return Response({'success': False, 'verified': False, 'message': 'Payment not successful'},
                            status=status.HTTP_400_BAD_REQUEST)
        updated, changed = settled
        return Response({
            'success': True,
            'verified': True,
            'already_applied': not changed,
            'booking': BookingSerializer(updated).data,
        })

    @action(detail=False, methods=['post'])
    def webhook(self, request):
        if not valid_webhook_signature(request.headers.get('verif-hash')):
            raise AuthorizationError('Invalid webhook signature')

        data = request.data.get('data') or {}
        ref = data.get('tx_ref')
        booking = Booking.objects.filter(transaction_ref=ref).first() if ref else None
        if booking is None:
            logger.warning('Webhook for unknown transaction reference %r ignored', ref)
            return Response({'success': False, 'message': 'Unknown transaction reference'})

        # the webhook body is only a hint; the gateway is asked again before settling
        settled = self._settle(booking, self.get_payment_client().verify(ref))
        return Response({'success': True, 'applied': bool(settled and settled[1])})
