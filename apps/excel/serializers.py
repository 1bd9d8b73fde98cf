from rest_framework import serializers

from .services import ExportType, ExportScope, DateRange, ImportType


class ExportRequestSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ExportType.choices)
    scope = serializers.ChoiceField(choices=ExportScope.choices, default=ExportScope.USER)
    date_range = serializers.ChoiceField(choices=DateRange.choices, default=DateRange.MONTH)
    start_date = serializers.DateField(required=False)
    end_date = serializers.DateField(required=False)
    user_id = serializers.UUIDField(required=False)

    def validate(self, attrs):
        if attrs['date_range'] == DateRange.CUSTOM and (
            attrs.get('start_date') is None or attrs.get('end_date') is None
        ):
            raise serializers.ValidationError("start_date and end_date are required for a custom range.")
        if attrs['scope'] == ExportScope.INDIVIDUAL and attrs.get('user_id') is None:
            raise serializers.ValidationError({'user_id': "Required for the individual scope."})
        return attrs


class ExportPreviewSerializer(serializers.Serializer):
    start_date = serializers.DateField()
    end_date = serializers.DateField()
    sheets = serializers.DictField(child=serializers.ListField(child=serializers.DictField()))


class ImportRequestSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ImportType.choices)
    file = serializers.FileField()

    def validate_file(self, value):
        if not value.name.lower().endswith(('.xlsx', '.xls')):
            raise serializers.ValidationError("Upload an .xlsx or .xls file.")
        return value


class ImportResultSerializer(serializers.Serializer):
    imported = serializers.IntegerField()
    total = serializers.IntegerField()
    failed = serializers.IntegerField()
    errors = serializers.ListField(child=serializers.CharField())


class TemplateQuerySerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=ImportType.choices, required=False)


class ExcelPermissionsSerializer(serializers.Serializer):
    can_export = serializers.BooleanField()
    can_import = serializers.BooleanField()
    export_types = serializers.ListField(child=serializers.CharField())
    export_scopes = serializers.ListField(child=serializers.CharField())
    import_types = serializers.ListField(child=serializers.CharField())
