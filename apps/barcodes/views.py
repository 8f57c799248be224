from rest_framework import status
from rest_framework.decorators import api_view, permission_classes
from rest_framework.permissions import IsAdminUser
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema

from apps.common.exceptions import ServiceError
from apps.common.responses import error_response
from .serializers import (
    BarcodeInstanceSerializer,
    GenerateBarcodeInputSerializer,
    GeneratedBarcodeSerializer,
    InspectBarcodeInputSerializer,
    InspectedBarcodeSerializer,
    BarcodeSummarySerializer,
    BeerCapMinimalSerializer,
    MissingBarcodesFilterSerializer,
    SwitchOriginalInputSerializer,
)
from .services import (
    generate_barcode,
    inspect_barcode,
    list_cap_barcodes,
    barcode_summary,
    list_caps_missing_barcodes,
    switch_original,
)


@extend_schema(
    request=GenerateBarcodeInputSerializer,
    responses={201: GeneratedBarcodeSerializer},
    description="Attach a new or recycled barcode to a cap design.",
    tags=['barcodes'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def generate(request):
    """Attach a barcode to a cap."""
    serializer = GenerateBarcodeInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        instance, reused = generate_barcode(
            beer_cap_id=serializer.validated_data['beer_cap_id'],
            sheet=serializer.validated_data.get('sheet')
        )
    except ServiceError as e:
        return error_response(e)

    output = GeneratedBarcodeSerializer({
        'barcode': instance.barcode,
        'beer_cap_id': instance.beer_cap_id,
        'control_bar': instance.control_bar,
        'reused': reused,
    })
    return Response(output.data, status=status.HTTP_201_CREATED)


@extend_schema(
    parameters=[InspectBarcodeInputSerializer],
    responses={200: InspectedBarcodeSerializer},
    description="Look up a scanned barcode and the cap it belongs to.",
    tags=['barcodes'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def inspect(request):
    """Inspect one barcode."""
    serializer = InspectBarcodeInputSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    try:
        instance = inspect_barcode(barcode=serializer.validated_data['barcode'])
    except ServiceError as e:
        return error_response(e)

    output = InspectedBarcodeSerializer({
        'instance': instance,
        'cap': instance.beer_cap if instance.control_bar else None,
    })
    return Response(output.data)


@extend_schema(
    responses={200: BarcodeInstanceSerializer(many=True)},
    description="Original and duplicate barcodes of a cap.",
    tags=['barcodes'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def cap_barcodes(request, cap_id):
    """List the barcodes of a cap still in the collection."""
    try:
        barcodes = list_cap_barcodes(beer_cap_id=cap_id)
    except ServiceError as e:
        return error_response(e)

    return Response({
        'beer_cap_id': cap_id,
        'barcodes': BarcodeInstanceSerializer(barcodes, many=True).data,
    })


@extend_schema(
    request=SwitchOriginalInputSerializer,
    description="Report whether a duplicate can become its cap's original, or switch it.",
    tags=['barcodes'],
)
@api_view(['POST'])
@permission_classes([IsAdminUser])
def switch_original_view(request):
    """Switch which physical cap is kept as the original."""
    serializer = SwitchOriginalInputSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = switch_original(
            barcode=serializer.validated_data['barcode'],
            confirm=serializer.validated_data['confirm']
        )
    except ServiceError as e:
        return error_response(e)

    return Response(result)


@extend_schema(
    responses={200: BarcodeSummarySerializer},
    description="How many cap designs exist and how many still have no barcode.",
    tags=['barcodes'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def summary(request):
    """Barcode coverage of the catalog."""
    return Response(BarcodeSummarySerializer(barcode_summary()).data)


@extend_schema(
    parameters=[MissingBarcodesFilterSerializer],
    responses={200: BeerCapMinimalSerializer(many=True)},
    description="Cap designs without any barcode, newest first.",
    tags=['barcodes'],
)
@api_view(['GET'])
@permission_classes([IsAdminUser])
def missing(request):
    """List caps that still need a barcode."""
    serializer = MissingBarcodesFilterSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    try:
        caps = list_caps_missing_barcodes(limit=serializer.validated_data.get('limit'))
    except ServiceError as e:
        return error_response(e)

    return Response({'caps': BeerCapMinimalSerializer(caps, many=True).data})
