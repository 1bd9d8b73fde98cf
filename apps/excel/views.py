from django.http import HttpResponse
from rest_framework import status
from rest_framework.decorators import api_view, permission_classes, parser_classes
from rest_framework.parsers import MultiPartParser, FormParser
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from drf_spectacular.utils import extend_schema, OpenApiParameter
from drf_spectacular.types import OpenApiTypes

from apps.groups.permissions import IsGroupMember
from apps.groups.services import get_active_membership

from .serializers import (
    ExportRequestSerializer,
    ExportPreviewSerializer,
    ImportRequestSerializer,
    ImportResultSerializer,
    TemplateQuerySerializer,
    ExcelPermissionsSerializer,
)
from .services import (
    XLSX_CONTENT_TYPE,
    get_excel_permissions,
    export_workbook,
    export_preview,
    import_workbook,
    import_template,
    # Exceptions
    ExcelServiceError,
    ExcelPermissionError,
)


def _service_error_response(e: Exception) -> Response:
    if isinstance(e, ExcelPermissionError):
        return Response({'error': str(e)}, status=status.HTTP_403_FORBIDDEN)
    return Response({'error': str(e)}, status=status.HTTP_400_BAD_REQUEST)


def _xlsx_response(filename: str, content: bytes) -> HttpResponse:
    response = HttpResponse(content, content_type=XLSX_CONTENT_TYPE)
    response['Content-Disposition'] = f'attachment; filename="{filename}"'
    return response


EXPORT_PARAMETERS = [
    OpenApiParameter('type', OpenApiTypes.STR, required=True),
    OpenApiParameter('scope', OpenApiTypes.STR),
    OpenApiParameter('date_range', OpenApiTypes.STR),
    OpenApiParameter('start_date', OpenApiTypes.DATE),
    OpenApiParameter('end_date', OpenApiTypes.DATE),
    OpenApiParameter('user_id', OpenApiTypes.UUID),
]


@extend_schema(responses={200: ExcelPermissionsSerializer}, tags=['excel'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def excel_permissions(request, group_id):
    membership = get_active_membership(group_id, request.user)
    return Response(ExcelPermissionsSerializer(get_excel_permissions(membership.role)).data)


@extend_schema(
    parameters=EXPORT_PARAMETERS,
    responses={(200, XLSX_CONTENT_TYPE): OpenApiTypes.BINARY},
    description="Download meals, shopping, payments, expenses, balances or calculations as xlsx.",
    tags=['excel'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def excel_export(request, group_id):
    serializer = ExportRequestSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        filename, content = export_workbook(
            group_id=group_id,
            user=request.user,
            export_type=data['type'],
            scope=data['scope'],
            date_range=data['date_range'],
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
            user_id=data.get('user_id'),
        )
    except ExcelServiceError as e:
        return _service_error_response(e)

    return _xlsx_response(filename, content)


@extend_schema(parameters=EXPORT_PARAMETERS, responses={200: ExportPreviewSerializer}, tags=['excel'])
@api_view(['GET'])
@permission_classes([IsAuthenticated, IsGroupMember])
def excel_preview(request, group_id):
    serializer = ExportRequestSerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)
    data = serializer.validated_data

    try:
        preview = export_preview(
            group_id=group_id,
            user=request.user,
            export_type=data['type'],
            scope=data['scope'],
            date_range=data['date_range'],
            start_date=data.get('start_date'),
            end_date=data.get('end_date'),
            user_id=data.get('user_id'),
        )
    except ExcelServiceError as e:
        return _service_error_response(e)

    return Response(ExportPreviewSerializer(preview).data)


@extend_schema(
    request={'multipart/form-data': ImportRequestSerializer},
    responses={200: ImportResultSerializer},
    description="Import meals, shopping items or payments from the first sheet of a workbook.",
    tags=['excel'],
)
@api_view(['POST'])
@permission_classes([IsAuthenticated, IsGroupMember])
@parser_classes([MultiPartParser, FormParser])
def excel_import(request, group_id):
    serializer = ImportRequestSerializer(data=request.data)
    serializer.is_valid(raise_exception=True)

    try:
        result = import_workbook(
            group_id=group_id,
            user=request.user,
            import_type=serializer.validated_data['type'],
            file=serializer.validated_data['file'],
        )
    except ExcelServiceError as e:
        return _service_error_response(e)

    return Response(ImportResultSerializer(result).data)


@extend_schema(
    parameters=[OpenApiParameter('type', OpenApiTypes.STR)],
    responses={(200, XLSX_CONTENT_TYPE): OpenApiTypes.BINARY},
    tags=['excel'],
)
@api_view(['GET'])
@permission_classes([IsAuthenticated])
def excel_template(request):
    serializer = TemplateQuerySerializer(data=request.query_params)
    serializer.is_valid(raise_exception=True)

    filename, content = import_template(serializer.validated_data.get('type'))
    return _xlsx_response(filename, content)
