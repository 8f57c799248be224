from django.conf import settings
from rest_framework import status, viewsets
from rest_framework.decorators import action
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from rest_framework.pagination import PageNumberPagination
from drf_spectacular.utils import extend_schema

from apps.barcodes.serializers import BarcodeInstanceSerializer, BeerCapMinimalSerializer
from apps.common.exceptions import ServiceError
from apps.common.responses import error_response
from .models import Trade, Trader
from .serializers import (
    AvailableDuplicatesFilterSerializer,
    CreateTradeInputSerializer,
    RemoveBarcodeInputSerializer,
    ReserveBarcodeInputSerializer,
    ReserveInstancesInputSerializer,
    ReservedCountSerializer,
    TradeFilterSerializer,
    TradeHistoryRowSerializer,
    TradeSerializer,
    TraderFilterSerializer,
    TraderInputSerializer,
    TraderSerializer,
)
from .services import (
    cancel_trade,
    complete_trade,
    create_trade,
    create_trader,
    delete_trader,
    get_trade,
    get_trade_history,
    get_trader,
    list_available_for_cap,
    list_reserved_for_trade,
    list_trades,
    list_traders,
    release_barcode,
    reserve_barcode,
    reserve_instances,
    update_trader,
)


class TradePagination(PageNumberPagination):
    """Trades list pagination; page size comes from ``limit``."""
    page_size = settings.TRADES_PAGE_SIZES[0]
    page_size_query_param = 'limit'
    max_page_size = max(settings.TRADES_PAGE_SIZES)


class TraderViewSet(viewsets.GenericViewSet):
    """
    Trader management.

    list: Traders with completed trade counts (filter: name, country_id; sort)
    create: Create a trader
    retrieve: Get a trader
    partial_update: Change name, country or details
    destroy: Delete a trader without trades
    """

    queryset = Trader.objects.select_related('country')
    serializer_class = TraderSerializer
    permission_classes = [IsAdminUser]
    lookup_value_regex = r'\d+'

    @extend_schema(parameters=[TraderFilterSerializer])
    def list(self, request):
        filter_serializer = TraderFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        try:
            traders = list_traders(
                name=params['name'],
                country_id=params.get('country_id'),
                sort=params['sort']
            )
        except ServiceError as e:
            return error_response(e)

        return Response(TraderSerializer(traders, many=True).data)

    @extend_schema(request=TraderInputSerializer, responses={201: TraderSerializer})
    def create(self, request):
        serializer = TraderInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            trader = create_trader(
                name=serializer.validated_data['name'],
                country_id=serializer.validated_data['country_id'],
                details=serializer.validated_data.get('details')
            )
        except ServiceError as e:
            return error_response(e)

        return Response(TraderSerializer(trader).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            trader = get_trader(trader_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(TraderSerializer(trader).data)

    @extend_schema(request=TraderInputSerializer, responses={200: TraderSerializer})
    def partial_update(self, request, pk=None):
        serializer = TraderInputSerializer(data=request.data, partial=True)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        try:
            trader = update_trader(
                trader_id=int(pk),
                name=data.get('name'),
                country_id=data.get('country_id'),
                details=data.get('details'),
                clear_details='details' in data and not data['details']
            )
        except ServiceError as e:
            return error_response(e)

        return Response(TraderSerializer(trader).data)

    def destroy(self, request, pk=None):
        try:
            delete_trader(trader_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(status=status.HTTP_204_NO_CONTENT)


class TradeViewSet(viewsets.GenericViewSet):
    """
    Trades and their reservations.

    All business logic is handled by services.
    Views are thin HTTP handlers only.

    list: Trades in one status (filter: type, trader, country; sort; limit)
    create: Open a pending trade
    retrieve: Get a trade with its cap count
    """

    queryset = Trade.objects.select_related('trader', 'trader__country')
    serializer_class = TradeSerializer
    permission_classes = [IsAdminUser]
    pagination_class = TradePagination
    lookup_value_regex = r'\d+'

    @extend_schema(parameters=[TradeFilterSerializer])
    def list(self, request):
        filter_serializer = TradeFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        try:
            trades = list_trades(
                status=params['status'],
                trade_type=params.get('type'),
                trader=params['trader'],
                country=params['country'],
                sort=params['sort']
            )
        except ServiceError as e:
            return error_response(e)

        page = self.paginate_queryset(trades)
        serializer = TradeSerializer(page, many=True)
        return self.get_paginated_response(serializer.data)

    @extend_schema(request=CreateTradeInputSerializer, responses={201: TradeSerializer})
    def create(self, request):
        serializer = CreateTradeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            trade = create_trade(
                trader_id=serializer.validated_data['trader_id'],
                trade_type=serializer.validated_data['trade_type'],
                notes=serializer.validated_data.get('notes')
            )
            trade = get_trade(trade_id=trade.pk)
        except ServiceError as e:
            return error_response(e)

        return Response(TradeSerializer(trade).data, status=status.HTTP_201_CREATED)

    def retrieve(self, request, pk=None):
        try:
            trade = get_trade(trade_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(TradeSerializer(trade).data)

    @extend_schema(request=ReserveInstancesInputSerializer, responses={200: ReservedCountSerializer})
    @action(detail=True, methods=['post'])
    def reserve(self, request, pk=None):
        """Reserve a set of available duplicates, all or nothing."""
        serializer = ReserveInstancesInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            result = reserve_instances(
                trade_id=int(pk),
                instance_ids=serializer.validated_data['instance_ids']
            )
        except ServiceError as e:
            return error_response(e)

        return Response(ReservedCountSerializer(result).data)

    @extend_schema(request=ReserveBarcodeInputSerializer, responses={200: BarcodeInstanceSerializer})
    @action(detail=True, methods=['post'])
    def reserve_barcode(self, request, pk=None):
        """Reserve one scanned barcode for the trade."""
        serializer = ReserveBarcodeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            instance = reserve_barcode(
                trade_id=int(pk),
                barcode=serializer.validated_data['barcode'],
                beer_cap_id=serializer.validated_data['beer_cap_id']
            )
        except ServiceError as e:
            return error_response(e)

        return Response(BarcodeInstanceSerializer(instance).data)

    @extend_schema(request=RemoveBarcodeInputSerializer, responses={200: BarcodeInstanceSerializer})
    @action(detail=True, methods=['post'])
    def remove_barcode(self, request, pk=None):
        """Put one reserved barcode back among the available duplicates."""
        serializer = RemoveBarcodeInputSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        try:
            instance = release_barcode(
                trade_id=int(pk),
                barcode=serializer.validated_data['barcode']
            )
        except ServiceError as e:
            return error_response(e)

        return Response(BarcodeInstanceSerializer(instance).data)

    @extend_schema(request=None, responses={200: TradeSerializer})
    @action(detail=True, methods=['post'])
    def cancel(self, request, pk=None):
        """Cancel a pending trade and release its reservations."""
        try:
            cancel_trade(trade_id=int(pk))
            trade = get_trade(trade_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(TradeSerializer(trade).data)

    @extend_schema(request=None, responses={200: TradeSerializer})
    @action(detail=True, methods=['post'])
    def complete(self, request, pk=None):
        """Complete a pending trade; reserved caps leave the collection."""
        try:
            complete_trade(trade_id=int(pk))
            trade = get_trade(trade_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(TradeSerializer(trade).data)

    @extend_schema(responses={200: BarcodeInstanceSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def reserved(self, request, pk=None):
        """Instances currently reserved for the trade."""
        try:
            instances = list_reserved_for_trade(trade_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(BarcodeInstanceSerializer(instances, many=True).data)

    @extend_schema(responses={200: TradeHistoryRowSerializer(many=True)})
    @action(detail=True, methods=['get'])
    def history(self, request, pk=None):
        """Caps sent in the trade, grouped by cap design."""
        try:
            rows = get_trade_history(trade_id=int(pk))
        except ServiceError as e:
            return error_response(e)
        return Response(TradeHistoryRowSerializer(rows, many=True).data)

    @extend_schema(parameters=[AvailableDuplicatesFilterSerializer])
    @action(detail=False, methods=['get'])
    def available_duplicates(self, request):
        """Available duplicates of one cap, oldest first."""
        filter_serializer = AvailableDuplicatesFilterSerializer(data=request.query_params)
        filter_serializer.is_valid(raise_exception=True)
        params = filter_serializer.validated_data

        try:
            cap, instances = list_available_for_cap(
                beer_cap_id=params['beer_cap_id'],
                limit=params.get('limit')
            )
        except ServiceError as e:
            return error_response(e)

        return Response({
            'cap': BeerCapMinimalSerializer(cap).data,
            'instances': BarcodeInstanceSerializer(instances, many=True).data,
        })
