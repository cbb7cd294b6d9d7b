from rest_framework import serializers

from projectflow.attachments.models import Attachment


class AttachmentSerializer(serializers.ModelSerializer):
    uploaded_by_name = serializers.CharField(
        source="uploaded_by.display_name", read_only=True
    )

    class Meta:
        model = Attachment
        fields = (
            "id",
            "file_name",
            "content_type",
            "file_size",
            "task",
            "uploaded_by",
            "uploaded_by_name",
            "created_at",
        )
        read_only_fields = fields
