# apps/communication/serializers.py

from rest_framework import serializers

from .models import EmailTemplate, SentEmail


class EmailTemplateSerializer(serializers.ModelSerializer):
    """
    Serializer for EmailTemplate model.
    """

    class Meta:
        model = EmailTemplate
        fields = [
            'id', 'name', 'description', 'subject', 'body_html', 'body_text',
            'is_active', 'variables', 'created_at', 'updated_at'
        ]
        read_only_fields = ['id', 'created_at', 'updated_at']

    def validate_variables(self, value):
        if not all(isinstance(name, str) for name in value):
            raise serializers.ValidationError('Variables must be a list of placeholder names.')
        return value


class SentEmailSerializer(serializers.ModelSerializer):
    template_name = serializers.CharField(source='template.name', read_only=True, default=None)

    class Meta:
        model = SentEmail
        fields = [
            'id', 'template', 'template_name', 'event_kind', 'recipients', 'cc',
            'subject', 'sent_at', 'success', 'error_message'
        ]
        read_only_fields = fields
